"""In-memory record store for one build."""

import hashlib
import logging

from famgraph.models import Person, Union, UnionRecord

logger = logging.getLogger(__name__)

TOP_LEVEL_DIR = "."


def union_id_for(key: str) -> str:
    """Stable union id derived from the directory holding the union record."""
    return "u-" + hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]


class RecordStore:
    """
    People and unions keyed by identity, with directory indexes.

    Partner references are resolved once at construction: references to
    unknown files are dropped, and unions left with no partner are dropped.
    """

    def __init__(self, people: list[Person], unions: list[Union]):
        self._people: dict[str, Person] = {}
        self._people_by_key: dict[str, Person] = {}
        self._people_by_dir: dict[str, list[Person]] = {}
        self._unions: dict[str, Union] = {}
        self._unions_by_parent: dict[str, list[Union]] = {}
        self._unions_by_partner: dict[str, list[Union]] = {}

        for person in people:
            self._people[person.id] = person
            self._people_by_key[person.key] = person
            self._people_by_dir.setdefault(person.directory, []).append(person)

        for union in unions:
            self._unions[union.id] = union
            self._unions_by_parent.setdefault(union.parent_directory, []).append(union)
            for partner_id in union.partner_ids:
                self._unions_by_partner.setdefault(partner_id, []).append(union)

        self.dangling: list[tuple[str, str]] = []  # (union key, unresolved ref)
        self.dropped_unions: list[str] = []
        self.duplicate_ids: list[tuple[str, str]] = []  # (person key, id)

    @classmethod
    def from_records(cls, people: list[Person], union_records: list[UnionRecord]) -> "RecordStore":
        """Build a store from parsed records. Every person must already have an id."""
        kept: list[Person] = []
        seen_ids: set[str] = set()
        duplicates: list[tuple[str, str]] = []

        for person in sorted(people, key=lambda p: p.key):
            if not person.id:
                raise ValueError(f"Person {person.key} has no id; assign ids before building a store")
            if person.id in seen_ids:
                duplicates.append((person.key, person.id))
                continue
            seen_ids.add(person.id)
            kept.append(person)

        by_key = {person.key: person for person in kept}
        unions: list[Union] = []
        dangling: list[tuple[str, str]] = []
        dropped: list[str] = []

        for record in sorted(union_records, key=lambda r: r.key):
            partner_ids: list[str] = []
            for ref in record.partner_refs:
                person = by_key.get(ref)
                if person is None:
                    dangling.append((record.key, ref))
                    continue
                if person.id not in partner_ids:
                    partner_ids.append(person.id)

            if not partner_ids:
                logger.debug("Dropping union %s: no resolvable partner", record.key)
                dropped.append(record.key)
                continue
            if len(partner_ids) > 2:
                logger.debug("Union %s lists more than two partners; keeping the first two", record.key)
                partner_ids = partner_ids[:2]

            unions.append(
                Union(
                    id=union_id_for(record.key),
                    key=record.key,
                    partner_ids=tuple(partner_ids),
                    married=record.married,
                    married_place=record.married_place,
                    ended_by=record.ended_by,
                    notes=record.notes,
                )
            )

        store = cls(kept, unions)
        store.dangling = dangling
        store.dropped_unions = dropped
        store.duplicate_ids = duplicates
        return store

    @property
    def people(self) -> list[Person]:
        return list(self._people.values())

    @property
    def unions(self) -> list[Union]:
        return list(self._unions.values())

    def __len__(self) -> int:
        return len(self._people)

    def __contains__(self, person_id: str) -> bool:
        return person_id in self._people

    def person(self, person_id: str) -> Person | None:
        return self._people.get(person_id)

    def person_by_key(self, key: str) -> Person | None:
        return self._people_by_key.get(key)

    def union(self, union_id: str) -> Union | None:
        return self._unions.get(union_id)

    def find_by_name(self, full_name: str) -> Person | None:
        """First person (by file identity) whose full name matches exactly."""
        for person in self._people.values():
            if person.full_name == full_name:
                return person
        return None

    def people_in_dir(self, directory: str) -> list[Person]:
        return list(self._people_by_dir.get(directory, []))

    def unions_in_dir(self, directory: str) -> list[Union]:
        """Unions stored in immediate subdirectories of `directory`."""
        return [u for u in self._unions_by_parent.get(directory, []) if u.key != directory]

    def unions_with_partner(self, person_id: str) -> list[Union]:
        return list(self._unions_by_partner.get(person_id, []))

    def top_level_people(self) -> list[Person]:
        return self.people_in_dir(TOP_LEVEL_DIR)

    def top_level_unions(self) -> list[Union]:
        return self.unions_in_dir(TOP_LEVEL_DIR)
