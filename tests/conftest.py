"""Shared fixtures: small markdown record collections written to tmp_path."""

import itertools
from pathlib import Path

import pytest
import yaml

from famgraph.parsing import assign_missing_ids, read_collection
from famgraph.store import RecordStore


def write_person(root: Path, rel: str, full_name: str | None, body: str = "", **fields) -> Path:
    data = {}
    if full_name is not None:
        data["full_name"] = full_name
    data.update(fields)
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    frontmatter = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    path.write_text(f"---\n{frontmatter}---\n{body}", encoding="utf-8")
    return path


def write_union(root: Path, rel_dir: str, partners: list[str], **fields) -> Path:
    data = {"partners": [{"ref": ref} for ref in partners]}
    data.update(fields)
    path = root / rel_dir / "_marriage.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    frontmatter = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    path.write_text(f"---\n{frontmatter}---\n", encoding="utf-8")
    return path


def load_store(root: Path) -> RecordStore:
    counter = itertools.count(1)
    collection = read_collection(root)
    people, _ = assign_missing_ids(collection.people, id_factory=lambda: f"gen-{next(counter)}")
    return RecordStore.from_records(people, collection.unions)


@pytest.fixture
def royal_dir(tmp_path) -> Path:
    """
    Elizabeth + Philip with children Charles and Anne; Charles married Diana
    (children William and Harry) and later Camilla (no children). Diana and
    Camilla are stored next to Charles as spouse-only records.
    """
    root = tmp_path / "royal"
    write_person(root, "elizabeth.md", "Elizabeth II", id="p-elizabeth", born="1926-04-21",
                 titles=["Queen of the United Kingdom"])
    write_person(root, "philip.md", "Philip", id="p-philip", born="1921-06-10",
                 died="2021-04-09", titles=["Duke of Edinburgh"])
    write_union(root, "elizabeth-philip", ["../elizabeth.md", "../philip.md"], married="1947-11-20")

    family = "elizabeth-philip"
    write_person(root, f"{family}/charles.md", "Charles", id="p-charles", born="1948-11-14",
                 titles=["Prince of Wales"])
    write_person(root, f"{family}/anne.md", "Anne", id="p-anne", born="1950-08-15",
                 titles=["Princess Royal"])
    write_person(root, f"{family}/diana.md", "Diana Spencer", id="p-diana", born="1961-07-01",
                 died="1997-08-31")
    write_person(root, f"{family}/camilla.md", "Camilla Shand", id="p-camilla", born="1947-07-17")
    write_union(root, f"{family}/charles-diana", ["../charles.md", "../diana.md"],
                married="1981-07-29", ended_by="divorce")
    write_union(root, f"{family}/charles-camilla", ["../charles.md", "../camilla.md"],
                married="2005-04-09")

    write_person(root, f"{family}/charles-diana/william.md", "William", id="p-william",
                 born="1982-06-21")
    write_person(root, f"{family}/charles-diana/harry.md", "Harry", id="p-harry",
                 born="1984-09-15")
    return root


@pytest.fixture
def royal_store(royal_dir) -> RecordStore:
    return load_store(royal_dir)


@pytest.fixture
def couple_dir(tmp_path) -> Path:
    """P1 and P2 with a single child C1."""
    root = tmp_path / "couple"
    write_person(root, "p1.md", "Parent One", id="P1")
    write_person(root, "p2.md", "Parent Two", id="P2")
    write_union(root, "p1-p2", ["../p1.md", "../p2.md"])
    write_person(root, "p1-p2/c1.md", "Child One", id="C1")
    return root


@pytest.fixture
def hub_dir(tmp_path) -> Path:
    """P1 partnered with P2 (no children) and P3 (child C1)."""
    root = tmp_path / "hub"
    write_person(root, "p1.md", "Robin Hub", id="P1")
    write_person(root, "p2.md", "Pat Early", id="P2")
    write_person(root, "p3.md", "Sam Later", id="P3")
    write_union(root, "p1-p2", ["../p1.md", "../p2.md"], married="1950")
    write_union(root, "p1-p3", ["../p1.md", "../p3.md"], married="1960")
    write_person(root, "p1-p3/c1.md", "Casey Hub", id="C1")
    return root


@pytest.fixture
def cyclic_dir(tmp_path) -> Path:
    """
    A's union lists C as second partner and B as child; B's union has child C,
    so C is both A's partner and A's grandchild.
    """
    root = tmp_path / "cyclic"
    write_person(root, "a.md", "Ada Loop", id="A")
    write_union(root, "u1", ["../a.md", "u2/c.md"])
    write_person(root, "u1/b.md", "Bea Loop", id="B")
    write_union(root, "u1/u2", ["../b.md"])
    write_person(root, "u1/u2/c.md", "Cy Loop", id="C")
    return root
