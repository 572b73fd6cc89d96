"""Data classes for family records, graph entities and layout output."""

from dataclasses import dataclass, field

BLUE = "blue"
ORANGE = "orange"
AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Photo:
    url: str | None = None
    remote: bool = False
    source: str = "none"  # frontmatter, sibling-fallback or none

    def to_dict(self) -> dict:
        return {"url": self.url, "remote": self.remote, "source": self.source}


@dataclass(frozen=True)
class Person:
    id: str  # empty until the identity pre-pass has run
    key: str  # file identity, posix path relative to the collection root
    full_name: str
    born: str = ""
    died: str = ""
    birth_place: str = ""
    titles: tuple[str, ...] = ()
    external_urls: tuple[str, ...] = ()
    notes: str = ""
    photo: Photo = field(default_factory=Photo)

    @property
    def directory(self) -> str:
        head, _, _ = self.key.rpartition("/")
        return head or "."

    @property
    def deceased(self) -> bool:
        return bool(self.died)

    @property
    def initials(self) -> str:
        parts = self.full_name.split()[:2]
        return "".join(part[0] for part in parts).upper()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "relPath": self.key,
            "fullName": self.full_name,
            "born": self.born,
            "died": self.died,
            "birthPlace": self.birth_place,
            "titles": list(self.titles),
            "externalUrls": list(self.external_urls),
            "notes": self.notes,
            "photo": self.photo.to_dict(),
            "initials": self.initials,
        }


@dataclass(frozen=True)
class UnionRecord:
    """A `_marriage.md` record before partner references are resolved."""

    key: str  # directory holding the record, relative to the collection root
    partner_refs: tuple[str, ...] = ()  # person file identities, in slot order
    married: str = ""
    married_place: str = ""
    ended_by: str = ""
    notes: str = ""


@dataclass(frozen=True)
class Union:
    id: str
    key: str
    partner_ids: tuple[str, ...]  # index 0 = first partner, index 1 = second partner
    married: str = ""
    married_place: str = ""
    ended_by: str = ""
    notes: str = ""

    @property
    def parent_directory(self) -> str:
        head, _, _ = self.key.rpartition("/")
        return head or "."

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "married": self.married,
            "marriedPlace": self.married_place,
            "endedBy": self.ended_by,
            "notes": self.notes,
        }


@dataclass
class RoleVote:
    first: int = 0
    second: int = 0


@dataclass(frozen=True)
class Spouse:
    person: Person
    union: Union

    def to_dict(self) -> dict:
        return {
            "id": self.person.id,
            "fullName": self.person.full_name,
            "born": self.person.born,
            "died": self.person.died,
            "notes": self.person.notes,
            "external": bool(self.person.external_urls),
            "externalUrl": self.person.external_urls[0] if self.person.external_urls else "",
            "deceased": self.person.deceased,
            "photo": self.person.photo.to_dict(),
            "initials": self.person.initials,
            "marriage": self.union.to_dict(),
        }


@dataclass(frozen=True)
class TreeNode:
    person: Person
    spouses: tuple[Spouse, ...] = ()
    children: tuple["TreeNode", ...] = ()

    def to_dict(self) -> dict:
        node = self.person.to_dict()
        node["deceased"] = self.person.deceased
        node["spouses"] = [spouse.to_dict() for spouse in self.spouses]
        node["children"] = [child.to_dict() for child in self.children]
        return node


@dataclass
class UnionNode:
    """A union as reached by the graph traversal."""

    id: str
    partner_ids: list[str]
    child_ids: list[str] = field(default_factory=list)
    married: str = ""
    ended_by: str = ""
    generation: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "partnerIds": list(self.partner_ids),
            "childIds": list(self.child_ids),
            "married": self.married,
            "endedBy": self.ended_by,
            "generation": self.generation,
        }


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    kind: str  # partner or child

    def to_dict(self) -> dict:
        return {"source": self.source, "target": self.target, "kind": self.kind}


@dataclass(frozen=True)
class Segment:
    x1: float
    y1: float
    x2: float
    y2: float

    def shifted(self, dx: float, dy: float) -> "Segment":
        return Segment(self.x1 + dx, self.y1 + dy, self.x2 + dx, self.y2 + dy)

    def to_dict(self) -> dict:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}


@dataclass(frozen=True)
class Dot:
    x: float
    y: float

    def shifted(self, dx: float, dy: float) -> "Dot":
        return Dot(self.x + dx, self.y + dy)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}
