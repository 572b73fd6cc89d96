"""
Generation-banded 2D layout for a FamilyGraph.

Each generation is placed left to right in blocks: multi-partner hubs,
couples, then singletons. Children are anchored under the mean x of their
parents' union points; an optional layered-graph hint supplies ordering keys
where no parent anchor exists.
"""

from dataclasses import dataclass, field
import logging
import math
from statistics import fmean

from famgraph.geometry import emit_geometry
from famgraph.graph import FamilyGraph, build_layout_graph
from famgraph.hints import OrderHint
from famgraph.models import BLUE, Dot, Segment

logger = logging.getLogger(__name__)

NODE_STEP = 150.0  # center-to-center spacing inside a block
BLOCK_GAP = 190.0  # minimum distance between neighbouring blocks
LEVEL_HEIGHT = 220.0
TOP_OFFSET = 90.0
MARGIN = 120.0
NODE_RADIUS = 34.0
MIN_WORLD_WIDTH = 1200.0
MIN_WORLD_HEIGHT = 800.0


@dataclass
class Block:
    members: list[str]
    anchor: float
    anchored: bool  # anchor is a coordinate rather than a stable-order position
    first_index: int

    @property
    def span(self) -> float:
        return (len(self.members) - 1) * NODE_STEP


@dataclass
class LayoutResult:
    graph: FamilyGraph
    positions: dict[str, tuple[float, float]] = field(default_factory=dict)
    union_positions: dict[str, tuple[float, float]] = field(default_factory=dict)
    segments: list[Segment] = field(default_factory=list)
    dots: list[Dot] = field(default_factory=list)
    world_width: float = MIN_WORLD_WIDTH
    world_height: float = MIN_WORLD_HEIGHT

    def to_payload(self) -> dict:
        nodes = []
        for person in self.graph.people:
            if person.id not in self.positions:
                continue
            x, y = self.positions[person.id]
            node = self.graph.person_payload(person)
            node.update(
                x=round(x, 2),
                y=round(y, 2),
                generation=self.graph.generation_by_id[person.id],
                kind="person",
            )
            nodes.append(node)

        unions = []
        for union in self.graph.unions:
            if union.id not in self.union_positions:
                continue
            x, y = self.union_positions[union.id]
            unions.append(
                {"id": union.id, "x": round(x, 2), "y": round(y, 2),
                 "generation": union.generation, "kind": "union"}
            )

        return {
            "nodes": nodes,
            "unions": unions,
            "segments": [
                {k: round(v, 2) for k, v in s.to_dict().items()} for s in self.segments
            ],
            "dots": [{k: round(v, 2) for k, v in d.to_dict().items()} for d in self.dots],
            "worldWidth": round(self.world_width, 2),
            "worldHeight": round(self.world_height, 2),
        }


def level_y(generation: int) -> float:
    return generation * LEVEL_HEIGHT + TOP_OFFSET


def _hint_keys(graph: FamilyGraph, hint: OrderHint | None) -> dict[str, float]:
    if hint is None:
        return {}
    try:
        keys = hint.suggest_order(build_layout_graph(graph)) or {}
        keys = {k: float(v) for k, v in keys.items()}
    except Exception as exc:
        logger.warning("Layout hint failed, using fallback ordering: %s", exc)
        return {}
    return {k: v for k, v in keys.items() if math.isfinite(v)}


class _FamilyIndex:
    """Same-generation partner adjacency and parent unions, per person."""

    def __init__(self, graph: FamilyGraph):
        gen = graph.generation_by_id
        self.partners: dict[str, list[str]] = {p.id: [] for p in graph.people}
        self.with_children: set[frozenset] = set()
        self.parent_unions: dict[str, list[str]] = {}

        for union in graph.unions:
            ids = [pid for pid in union.partner_ids if pid in gen]
            for a in ids:
                for b in ids:
                    if a != b and gen[a] == gen[b] and b not in self.partners[a]:
                        self.partners[a].append(b)
            if len(ids) == 2 and union.child_ids:
                self.with_children.add(frozenset(ids))
            for child_id in union.child_ids:
                self.parent_unions.setdefault(child_id, []).append(union.id)

    def has_children_together(self, a: str, b: str) -> bool:
        return frozenset((a, b)) in self.with_children


def _base_keys(
    ids: list[str],
    generation: int,
    graph: FamilyGraph,
    index: _FamilyIndex,
    union_x: dict[str, float],
    hint_keys: dict[str, float],
) -> tuple[dict[str, float], set[str]]:
    """Ordering key per person, plus the ids whose key comes from placed parents."""
    keys: dict[str, float] = {}
    anchored: set[str] = set()

    if generation == 0:
        root = graph.person(graph.root_person_id)
        root_name = root.full_name if root is not None else ""
        for person_id in ids:
            if person_id in hint_keys:
                keys[person_id] = hint_keys[person_id]
            elif person_id == graph.root_person_id:
                keys[person_id] = -math.inf
            else:
                name = graph.person(person_id).full_name
                keys[person_id] = 0.0 if name < root_name else 1.0
        return keys, anchored

    for person_id in ids:
        parent_xs = [union_x[u] for u in index.parent_unions.get(person_id, []) if u in union_x]
        if parent_xs:
            keys[person_id] = fmean(parent_xs)
            anchored.add(person_id)
        else:
            keys[person_id] = hint_keys.get(person_id, math.inf)
    return keys, anchored


def _build_blocks(
    order: list[str],
    keys: dict[str, float],
    anchored: set[str],
    index: _FamilyIndex,
    tones: dict[str, str],
) -> list[Block]:
    stable = {person_id: i for i, person_id in enumerate(order)}
    in_band = set(order)
    used: set[str] = set()
    groups: list[list[str]] = []

    def free_partners(person_id: str) -> list[str]:
        return [p for p in index.partners.get(person_id, []) if p in in_band and p not in used]

    def by_key(person_id: str) -> tuple:
        return (keys[person_id], stable[person_id])

    # Hubs: childless partners to the left, partners with children to the right
    for person_id in order:
        if person_id in used:
            continue
        partners = free_partners(person_id)
        if len(partners) < 2:
            continue
        left = sorted((p for p in partners if not index.has_children_together(person_id, p)), key=by_key)
        right = sorted((p for p in partners if index.has_children_together(person_id, p)), key=by_key)
        members = [*left, person_id, *right]
        used.update(members)
        groups.append(members)

    # Couples
    for person_id in order:
        if person_id in used:
            continue
        partners = free_partners(person_id)
        if len(partners) != 1 or free_partners(partners[0]) != [person_id]:
            continue
        members = sorted(
            [person_id, partners[0]],
            key=lambda p: (0 if tones.get(p, BLUE) == BLUE else 1, *by_key(p)),
        )
        used.update(members)
        groups.append(members)

    for person_id in order:
        if person_id not in used:
            used.add(person_id)
            groups.append([person_id])

    blocks = []
    for members in groups:
        parent_keys = [keys[m] for m in members if m in anchored]
        known_keys = [keys[m] for m in members if keys[m] != math.inf]
        if parent_keys:
            anchor, is_coordinate = fmean(parent_keys), True
        elif known_keys:
            anchor, is_coordinate = fmean(known_keys), True
        else:
            anchor, is_coordinate = fmean(stable[m] for m in members), False
        blocks.append(Block(members, anchor, is_coordinate, min(stable[m] for m in members)))

    blocks.sort(key=lambda b: (0 if b.anchored else 1, b.anchor, b.first_index))
    return blocks


def _block_starts(blocks: list[Block], generation: int) -> list[float]:
    """
    Left edge of each block.

    Generation 0 packs blocks left to right. Later generations aim each block's
    center at its anchor; a forward pass pushes blocks right, a backward pass
    pulls them left, and the two are averaged, which keeps every gap.
    """
    if generation == 0:
        starts, cursor = [], 0.0
        for block in blocks:
            starts.append(cursor)
            cursor += block.span + BLOCK_GAP
        return starts

    n = len(blocks)
    desired = [
        b.anchor - b.span / 2 if b.anchored and math.isfinite(b.anchor) else None for b in blocks
    ]

    forward: list[float] = []
    for i in range(n):
        low = forward[i - 1] + blocks[i - 1].span + BLOCK_GAP if i > 0 else -math.inf
        want = desired[i] if desired[i] is not None else (low if i > 0 else 0.0)
        forward.append(max(want, low))

    backward = [0.0] * n
    for i in reversed(range(n)):
        high = backward[i + 1] - blocks[i].span - BLOCK_GAP if i < n - 1 else math.inf
        want = desired[i] if desired[i] is not None else forward[i]
        backward[i] = min(want, high)

    return [(f + b) / 2 for f, b in zip(forward, backward)]


def _normalize(result: LayoutResult):
    """Shift everything so the drawing starts at MARGIN and size the canvas."""
    xs, ys = [], []
    for x, y in result.positions.values():
        xs += [x - NODE_RADIUS, x + NODE_RADIUS]
        ys += [y - NODE_RADIUS, y + NODE_RADIUS]
    for x, y in result.union_positions.values():
        xs.append(x)
        ys.append(y)
    for s in result.segments:
        xs += [s.x1, s.x2]
        ys += [s.y1, s.y2]
    if not xs:
        return

    dx = max(0.0, MARGIN - min(xs))
    dy = max(0.0, MARGIN - min(ys))

    result.positions = {k: (x + dx, y + dy) for k, (x, y) in result.positions.items()}
    result.union_positions = {k: (x + dx, y + dy) for k, (x, y) in result.union_positions.items()}
    result.segments = [s.shifted(dx, dy) for s in result.segments]
    result.dots = [d.shifted(dx, dy) for d in result.dots]
    result.world_width = max(MIN_WORLD_WIDTH, max(xs) + dx + MARGIN)
    result.world_height = max(MIN_WORLD_HEIGHT, max(ys) + dy + MARGIN)


def compute_layout(graph: FamilyGraph, hint: OrderHint | None = None) -> LayoutResult:
    """
    Place every person and union of `graph`.

    The hint is advisory; when it is missing or fails the layout falls back to
    root-first ordering and parent anchoring alone.
    """
    result = LayoutResult(graph=graph)
    if not graph.people:
        return result

    hint_keys = _hint_keys(graph, hint)
    index = _FamilyIndex(graph)
    source_order = {p.id: i for i, p in enumerate(graph.people)}
    names = {p.id: p.full_name for p in graph.people}

    by_generation: dict[int, list[str]] = {}
    for person in graph.people:
        by_generation.setdefault(graph.generation_by_id[person.id], []).append(person.id)

    union_x: dict[str, float] = {}
    for generation in sorted(by_generation):
        ids = by_generation[generation]
        keys, anchored = _base_keys(ids, generation, graph, index, union_x, hint_keys)
        order = sorted(ids, key=lambda p: (keys[p], source_order[p], names[p]))
        blocks = _build_blocks(order, keys, anchored, index, graph.tones)

        y = level_y(generation)
        for block, start in zip(blocks, _block_starts(blocks, generation)):
            for j, person_id in enumerate(block.members):
                result.positions[person_id] = (start + j * NODE_STEP, y)

        for union in graph.unions:
            if union.generation != generation:
                continue
            xs = [
                result.positions[p][0]
                for p in union.partner_ids
                if p in result.positions and graph.generation_by_id.get(p) == generation
            ]
            if xs:
                union_x[union.id] = fmean(xs)
                result.union_positions[union.id] = (union_x[union.id], level_y(generation))

    result.segments, result.dots = emit_geometry(
        graph.unions, result.positions, result.union_positions
    )
    _normalize(result)
    return result
