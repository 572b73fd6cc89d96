"""One build: records -> store -> tree, graph and layout payloads."""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Callable
import uuid

from famgraph.graph import FamilyGraph, build_graph
from famgraph.hints import OrderHint
from famgraph.layout import LayoutResult, compute_layout
from famgraph.parsing import assign_missing_ids, read_collection, write_back_ids
from famgraph.resolver import Resolver
from famgraph.store import RecordStore
from famgraph.tree import build_node, select_root, tree_payload
from famgraph.validation import validate_store

logger = logging.getLogger(__name__)


@dataclass
class FamilyBuild:
    tree: dict
    graph: FamilyGraph
    layout: LayoutResult
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def graph_payload(self) -> dict:
        return self.graph.to_payload()

    @property
    def layout_payload(self) -> dict:
        return self.layout.to_payload()


def empty_build(source_label: str, error: str) -> FamilyBuild:
    graph = FamilyGraph()
    return FamilyBuild(
        tree=tree_payload(None, 0, source_label, error=error),
        graph=graph,
        layout=LayoutResult(graph=graph),
        error=error,
    )


def build_family(
    source_dir: Path,
    root_person_name: str = "",
    hint: OrderHint | None = None,
    write_ids: bool = True,
    id_factory: Callable[[], object] = uuid.uuid4,
) -> FamilyBuild:
    """
    Read a record collection and produce every payload.

    A missing or unreadable collection gives empty payloads with `error` set
    rather than an exception. Generated ids are written back to their files
    when `write_ids` is true; failures to do so become warnings.
    """
    source_dir = Path(source_dir)
    source_label = source_dir.as_posix()

    if not source_dir.is_dir():
        error = f"Family source folder not found: {source_label}"
        logger.warning(error)
        return empty_build(source_label, error)

    try:
        collection = read_collection(source_dir)
    except OSError as exc:
        error = f"Family source folder unreadable: {source_label}: {exc}"
        logger.warning(error)
        return empty_build(source_label, error)

    warnings = list(collection.warnings)
    people, write_back = assign_missing_ids(collection.people, id_factory)
    if write_ids and write_back:
        warnings += write_back_ids(source_dir, write_back)

    store = RecordStore.from_records(people, collection.unions)
    warnings += validate_store(store)

    root = select_root(store, root_person_name)
    if root_person_name and (root is None or root.full_name != root_person_name):
        warnings.append(f"Root person {root_person_name!r} not found; using default root")

    if root is None:
        graph = FamilyGraph()
        tree_root = None
    else:
        graph = build_graph(store, root.id)
        tree_root = build_node(Resolver(store), root.id)

    return FamilyBuild(
        tree=tree_payload(tree_root, len(store), source_label),
        graph=graph,
        layout=compute_layout(graph, hint),
        warnings=warnings,
    )
