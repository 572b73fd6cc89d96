"""Person/union graph construction and NetworkX graph building."""

from collections import deque
from dataclasses import dataclass, field
import math

import networkx as nx

from famgraph.models import Edge, Person, RoleVote, UnionNode
from famgraph.resolver import Resolver, people_sort_key
from famgraph.store import RecordStore
from famgraph.tone import ring_tone

SUBTITLE_MAX_LENGTH = 48


@dataclass
class FamilyGraph:
    root_person_id: str = ""
    people: list[Person] = field(default_factory=list)
    unions: list[UnionNode] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    generation_by_id: dict[str, int] = field(default_factory=dict)
    role_votes: dict[str, RoleVote] = field(default_factory=dict)
    tones: dict[str, str] = field(default_factory=dict)

    @property
    def max_generation(self) -> int:
        return max(self.generation_by_id.values(), default=0)

    def person(self, person_id: str) -> Person | None:
        for person in self.people:
            if person.id == person_id:
                return person
        return None

    def person_payload(self, person: Person) -> dict:
        first_title = person.titles[0] if person.titles else ""
        return {
            "id": person.id,
            "fullName": person.full_name,
            "subtitle": first_title if len(first_title) < SUBTITLE_MAX_LENGTH else "",
            "born": person.born,
            "died": person.died,
            "deceased": person.deceased,
            "initials": person.initials,
            "ringTone": self.tones.get(person.id, "blue"),
            "photo": person.photo.url,
        }

    def to_payload(self) -> dict:
        return {
            "rootPersonId": self.root_person_id,
            "people": [self.person_payload(p) for p in self.people],
            "unions": [u.to_dict() for u in self.unions],
            "edges": [e.to_dict() for e in self.edges],
            "generationById": dict(self.generation_by_id),
            "maxGeneration": self.max_generation,
        }


def build_graph(store: RecordStore, root_person_id: str) -> FamilyGraph:
    """
    Breadth-first traversal from the root through union -> child edges.

    Every person keeps the smallest generation seen; an entry is only queued
    when it strictly improves a known generation, so the walk ends even on
    cyclic records. Partners are queued at their union's generation so their
    other unions are reached too.
    """
    if root_person_id not in store:
        raise ValueError(f"Person ID {root_person_id} not found in record store")

    resolver = Resolver(store)
    generation: dict[str, int] = {root_person_id: 0}
    unions: dict[str, UnionNode] = {}
    votes: dict[str, RoleVote] = {}
    queue: deque[tuple[str, int]] = deque([(root_person_id, 0)])

    while queue:
        person_id, gen = queue.popleft()
        if generation.get(person_id, math.inf) < gen:
            continue

        for union in resolver.unions_for_person(person_id):
            node = unions.get(union.id)
            if node is None:
                node = UnionNode(
                    id=union.id,
                    partner_ids=list(union.partner_ids),
                    married=union.married,
                    ended_by=union.ended_by,
                    generation=gen,
                )
                unions[union.id] = node
                for slot, partner_id in enumerate(union.partner_ids):
                    vote = votes.setdefault(partner_id, RoleVote())
                    if slot == 0:
                        vote.first += 1
                    else:
                        vote.second += 1
            else:
                node.generation = min(node.generation, gen)

            for partner_id in union.partner_ids:
                if gen < generation.get(partner_id, math.inf):
                    generation[partner_id] = gen
                    queue.append((partner_id, gen))

            for child in resolver.children_of_union(union):
                if child.id not in node.child_ids:
                    node.child_ids.append(child.id)
                if gen + 1 < generation.get(child.id, math.inf):
                    generation[child.id] = gen + 1
                    queue.append((child.id, gen + 1))

    people = sorted(
        (store.person(person_id) for person_id in generation),
        key=lambda p: (generation[p.id], *people_sort_key(p)),
    )
    union_nodes = sorted(
        (u for u in unions.values() if u.partner_ids),
        key=lambda u: (u.generation, u.id),
    )

    edges: list[Edge] = []
    for node in union_nodes:
        edges.extend(Edge(partner_id, node.id, "partner") for partner_id in node.partner_ids)
        edges.extend(Edge(node.id, child_id, "child") for child_id in node.child_ids)

    return FamilyGraph(
        root_person_id=root_person_id,
        people=people,
        unions=union_nodes,
        edges=edges,
        generation_by_id={p.id: generation[p.id] for p in people},
        role_votes=votes,
        tones={p.id: ring_tone(p.full_name, p.titles, votes.get(p.id)) for p in people},
    )


def build_layout_graph(graph: FamilyGraph) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model.

    Family nodes connect partners to their children, so partners share a rank
    and siblings hang from a single point.
    """
    H = nx.DiGraph()

    for person in graph.people:
        H.add_node(
            person.id,
            node_type="person",
            person_name=person.full_name,
            generation=graph.generation_by_id[person.id],
            tone=graph.tones.get(person.id, "blue"),
        )

    for union in graph.unions:
        H.add_node(
            union.id,
            node_type="family",
            spouses=tuple(union.partner_ids),
            generation=union.generation,
        )
        for partner_id in union.partner_ids:
            H.add_edge(partner_id, union.id, edge_type="spouse_to_family")
        for child_id in union.child_ids:
            H.add_edge(union.id, child_id, edge_type="family_to_child")

    return H
