"""Nested ancestry tree (person -> spouses -> children) for list-style rendering."""

from datetime import datetime, timezone

from famgraph.models import Person, Spouse, TreeNode
from famgraph.parsing import IMAGE_EXT_FALLBACK_ORDER
from famgraph.resolver import Resolver, sort_people, sort_unions
from famgraph.store import RecordStore


def select_root(store: RecordStore, root_person_name: str = "") -> Person | None:
    """
    Pick the tree root.

    Precedence: an exact full-name match, the first partner of the earliest
    top-level union, the earliest top-level person, then the smallest id.
    """
    if root_person_name:
        match = store.find_by_name(root_person_name)
        if match is not None:
            return match

    top_unions = sort_unions(store.top_level_unions())
    if top_unions and top_unions[0].partner_ids:
        return store.person(top_unions[0].partner_ids[0])

    top_people = sort_people(store.top_level_people())
    if top_people:
        return top_people[0]

    if len(store) > 0:
        return store.person(min(p.id for p in store.people))
    return None


def build_node(resolver: Resolver, person_id: str, path: frozenset = frozenset()) -> TreeNode | None:
    """
    Expand a person into a TreeNode.

    `path` holds the ids on the way from the root; meeting one of them again
    yields a leaf so cyclic records cannot recurse forever.
    """
    person = resolver.store.person(person_id)
    if person is None:
        return None

    if person_id in path:
        return TreeNode(person=person)

    next_path = path | {person_id}
    spouses: list[Spouse] = []
    child_ids: list[str] = []

    for union in resolver.unions_for_person(person_id):
        spouse = resolver.spouse_in(union, person_id)
        if spouse is not None:
            spouses.append(Spouse(person=spouse, union=union))

        for child in resolver.children_of_union(union):
            if child.id not in child_ids:
                child_ids.append(child.id)

    children = [build_node(resolver, child_id, next_path) for child_id in child_ids]

    return TreeNode(
        person=person,
        spouses=tuple(spouses),
        children=tuple(child for child in children if child is not None),
    )


def build_tree(store: RecordStore, root_person_name: str = "") -> TreeNode | None:
    root = select_root(store, root_person_name)
    if root is None:
        return None
    return build_node(Resolver(store), root.id)


def tree_payload(
    root: TreeNode | None, total_people: int, source_dir: str, error: str | None = None
) -> dict:
    payload = {
        "sourceDir": source_dir,
        "imageFallbackOrder": list(IMAGE_EXT_FALLBACK_ORDER),
        "root": root.to_dict() if root is not None else None,
        "totalPeople": total_people,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }
    if error:
        payload["error"] = error
    return payload
