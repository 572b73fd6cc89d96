"""Relationship resolution: unions of a person, children of a union, sort laws."""

from famgraph.models import Person, RoleVote, Union
from famgraph.store import RecordStore


def people_sort_key(person: Person) -> tuple:
    return (0 if person.born else 1, person.born, person.full_name, person.id)


def unions_sort_key(union: Union) -> tuple:
    return (0 if union.married else 1, union.married, union.key)


def sort_people(people) -> list[Person]:
    """
    Sort by raw `born` text (dated before undated), then full name.

    Dates are compared as plain strings, never parsed.
    """
    return sorted(people, key=people_sort_key)


def sort_unions(unions) -> list[Union]:
    """Sort by raw `married` text (dated before undated), then storage location."""
    return sorted(unions, key=unions_sort_key)


def count_roles(unions) -> dict[str, RoleVote]:
    """Tally how often each person fills the first and second partner slot."""
    votes: dict[str, RoleVote] = {}
    for union in unions:
        for slot, person_id in enumerate(union.partner_ids[:2]):
            vote = votes.setdefault(person_id, RoleVote())
            if slot == 0:
                vote.first += 1
            else:
                vote.second += 1
    return votes


def is_spouse_only(vote: RoleVote | None) -> bool:
    """Someone recorded only ever as a second partner married into the family."""
    return vote is not None and vote.second > 0 and vote.first == 0


class Resolver:
    """Answers relationship questions against a RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store
        self._children: dict[str, list[Person]] = {}

    def unions_for_person(self, person_id: str) -> list[Union]:
        return sort_unions(self.store.unions_with_partner(person_id))

    def spouse_in(self, union: Union, person_id: str) -> Person | None:
        """The other partner of `union`, if recorded."""
        for partner_id in union.partner_ids:
            if partner_id != person_id:
                return self.store.person(partner_id)
        return None

    def children_of_union(self, union: Union) -> list[Person]:
        """
        People stored next to the union record, minus its partners and minus
        anyone who appears only as a second partner in the unions nested
        directly below it (spouses who married into the family).
        """
        cached = self._children.get(union.id)
        if cached is not None:
            return list(cached)

        excluded = set(union.partner_ids) | {p.id for p in self.married_in(union)}
        children = sort_people(
            person for person in self.store.people_in_dir(union.key) if person.id not in excluded
        )
        self._children[union.id] = children
        return list(children)

    def married_in(self, union: Union) -> list[Person]:
        """People stored next to the union record who are spouses, not children."""
        partners = set(union.partner_ids)
        votes = count_roles(self.store.unions_in_dir(union.key))
        return [
            person
            for person in self.store.people_in_dir(union.key)
            if person.id not in partners and is_spouse_only(votes.get(person.id))
        ]

