"""Record validation for family collections."""

import networkx as nx

from famgraph.resolver import Resolver
from famgraph.store import RecordStore


def build_descent_graph(store: RecordStore) -> nx.DiGraph:
    """Directed partner -> child graph over every union in the store."""
    resolver = Resolver(store)
    G = nx.DiGraph()
    for person in store.people:
        G.add_node(person.id, person_name=person.full_name)
    for union in store.unions:
        for child in resolver.children_of_union(union):
            for partner_id in union.partner_ids:
                G.add_edge(partner_id, child.id, union_id=union.id)
    return G


def validate_store(store: RecordStore) -> list[str]:
    """
    Validate the family records for:
    - Cycles in descent (someone recorded as their own ancestor)
    - Partner references that name no known person
    - Unions dropped for lacking any resolvable partner
    - Duplicate person ids
    - People stored beside a union but classed as married-in spouses

    Returns a list of warning messages.
    """
    warnings: list[str] = []

    G = build_descent_graph(store)
    try:
        cycle = nx.find_cycle(G, orientation="original")
        names = [G.nodes[edge[0]].get("person_name", edge[0]) for edge in cycle]
        warnings.append(f"Cycle detected in descent: {' -> '.join(names)}")
    except nx.NetworkXNoCycle:
        pass

    for union_key, ref in store.dangling:
        warnings.append(f"Union {union_key} references unknown person {ref}")

    for union_key in store.dropped_unions:
        warnings.append(f"Union {union_key} dropped: no resolvable partner")

    for person_key, person_id in store.duplicate_ids:
        warnings.append(f"Person {person_key} ignored: id {person_id} is already in use")

    resolver = Resolver(store)
    married_in = {person.id for union in store.unions for person in resolver.married_in(union)}
    if married_in:
        warnings.append(f"{len(married_in)} people treated as spouses rather than children")

    return warnings
