"""Markdown frontmatter reading, identity assignment and identity write-back."""

from dataclasses import dataclass, field, replace
import logging
import os
from pathlib import Path
import posixpath
import re
from typing import Callable
import uuid

import yaml

from famgraph.models import Person, Photo, UnionRecord

logger = logging.getLogger(__name__)

MARRIAGE_FILENAME = "_marriage.md"
IMAGE_EXT_FALLBACK_ORDER = (".png", ".jpg", ".jpeg", ".webp", ".avif")

FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---(?:\n|\Z)", re.DOTALL)
FULL_NAME_LINE_RE = re.compile(r"^\s*full_name:\s*")
REMOTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass
class Collection:
    people: list[Person] = field(default_factory=list)
    unions: list[UnionRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class IdWriteBack:
    key: str
    id: str


def clean_scalar(value) -> str:
    """Normalize a frontmatter value into a trimmed string ('' for missing)."""
    if value is None:
        return ""
    s = str(value).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    return s


def clean_list(value) -> tuple[str, ...]:
    """Normalize a frontmatter list, dropping blank items."""
    if value is None:
        return ()
    if not isinstance(value, list):
        value = [value]
    cleaned = (clean_scalar(item) for item in value)
    return tuple(item for item in cleaned if item)


def split_frontmatter(text: str) -> tuple[dict, str]:
    """
    Split a markdown document into (frontmatter data, body).

    Documents without a well-formed `---` block have empty data and the whole
    text as body. Scalars stay raw strings (no date, number or boolean
    resolution). Raises yaml.YAMLError on invalid YAML inside the block.
    """
    match = FRONTMATTER_RE.match(text)
    if match is None:
        return {}, text

    data = yaml.load(match.group(1), Loader=yaml.BaseLoader)
    if not isinstance(data, dict):
        data = {}
    return data, text[match.end():]


def to_key(source_dir: Path, path: Path) -> str:
    return path.relative_to(source_dir).as_posix()


def resolve_photo(source_dir: Path, person_path: Path, meta: dict) -> Photo:
    """
    Find a portrait for a person file.

    Precedence: an explicit remote URL, an explicit local path relative to the
    person file, then a sibling image sharing the file's stem.
    """
    explicit = clean_scalar(meta.get("photo"))
    if explicit:
        if REMOTE_URL_RE.match(explicit):
            return Photo(url=explicit, remote=True, source="frontmatter")

        explicit_local = person_path.parent / explicit
        if explicit_local.is_file():
            rel = os.path.relpath(explicit_local, source_dir)
            return Photo(url=Path(rel).as_posix(), remote=False, source="frontmatter")

    for ext in IMAGE_EXT_FALLBACK_ORDER:
        candidate = person_path.with_suffix(ext)
        if candidate.is_file():
            return Photo(url=to_key(source_dir, candidate), remote=False, source="sibling-fallback")

    return Photo()


def parse_person(source_dir: Path, path: Path, text: str) -> Person | None:
    """Build a Person from a markdown file; None when it has no full_name."""
    data, body = split_frontmatter(text)
    full_name = clean_scalar(data.get("full_name"))
    if not full_name:
        return None

    return Person(
        id=clean_scalar(data.get("id")),
        key=to_key(source_dir, path),
        full_name=full_name,
        born=clean_scalar(data.get("born")),
        died=clean_scalar(data.get("died")),
        birth_place=clean_scalar(data.get("birth_place")),
        titles=clean_list(data.get("titles")),
        external_urls=clean_list(data.get("external_url")),
        notes=body.strip(),
        photo=resolve_photo(source_dir, path, data),
    )


def parse_marriage(source_dir: Path, path: Path, text: str) -> UnionRecord:
    """Build a UnionRecord from a `_marriage.md` file."""
    data, _ = split_frontmatter(text)
    union_dir = to_key(source_dir, path.parent)

    partners = data.get("partners")
    if not isinstance(partners, list):
        partners = []

    refs = []
    for item in partners:
        if not isinstance(item, dict):
            continue
        ref = clean_scalar(item.get("ref"))
        if ref:
            refs.append(posixpath.normpath(posixpath.join(union_dir, ref)))

    return UnionRecord(
        key=union_dir,
        partner_refs=tuple(refs),
        married=clean_scalar(data.get("married")),
        married_place=clean_scalar(data.get("married_place")),
        ended_by=clean_scalar(data.get("ended_by")),
        notes=clean_scalar(data.get("notes")),
    )


def read_collection(source_dir: Path) -> Collection:
    """
    Read every markdown record under source_dir.

    Unreadable or invalid files are skipped with a warning; person files
    without a full_name are not people and are skipped silently.
    """
    collection = Collection()

    for path in sorted(source_dir.rglob("*.md")):
        if not path.is_file():
            continue
        key = to_key(source_dir, path)

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            collection.warnings.append(f"Skipped unreadable record {key}: {exc}")
            continue

        try:
            if path.name == MARRIAGE_FILENAME:
                collection.unions.append(parse_marriage(source_dir, path, text))
                continue
            person = parse_person(source_dir, path, text)
        except yaml.YAMLError as exc:
            collection.warnings.append(f"Skipped record with invalid frontmatter {key}: {exc}")
            continue

        if person is None:
            logger.debug("Skipping %s: no full_name", key)
            continue
        collection.people.append(person)

    return collection


def assign_missing_ids(
    people: list[Person], id_factory: Callable[[], object] = uuid.uuid4
) -> tuple[list[Person], list[IdWriteBack]]:
    """
    Give every person an id, returning (people with ids, pending write-backs).

    The input records are left untouched; persisting the new ids is up to the
    caller (see write_back_ids).
    """
    with_ids: list[Person] = []
    write_back: list[IdWriteBack] = []

    for person in people:
        if person.id:
            with_ids.append(person)
            continue
        new_id = str(id_factory())
        with_ids.append(replace(person, id=new_id))
        write_back.append(IdWriteBack(key=person.key, id=new_id))

    return with_ids, write_back


def insert_id(text: str, new_id: str) -> str:
    """Insert `id: <new_id>` after the full_name line of a document's frontmatter."""
    match = FRONTMATTER_RE.match(text)
    if match is None:
        return f"---\nid: {new_id}\n---\n\n{text}"

    lines = match.group(1).split("\n")
    insert_at = next((i + 1 for i, line in enumerate(lines) if FULL_NAME_LINE_RE.match(line)), 0)
    lines.insert(insert_at, f"id: {new_id}")
    return "---\n" + "\n".join(lines) + "\n---\n" + text[match.end():]


def write_back_ids(source_dir: Path, write_back: list[IdWriteBack]) -> list[str]:
    """
    Persist generated ids into their person files.

    Files that already carry an id are left alone. Failures are returned as
    warning messages; the in-memory ids stay valid for the current build.
    """
    warnings: list[str] = []

    for item in write_back:
        path = source_dir / item.key
        try:
            text = path.read_text(encoding="utf-8")
            try:
                data, _ = split_frontmatter(text)
            except yaml.YAMLError:
                data = {}
            if clean_scalar(data.get("id")):
                continue
            path.write_text(insert_id(text, item.id), encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            message = f"Could not persist id {item.id} for {item.key}: {exc}"
            logger.warning(message)
            warnings.append(message)

    return warnings
