"""Tests for record reading, identity assignment and write-back."""

from famgraph.models import Person
from famgraph.parsing import (
    IdWriteBack,
    assign_missing_ids,
    clean_list,
    clean_scalar,
    insert_id,
    read_collection,
    resolve_photo,
    split_frontmatter,
    write_back_ids,
)

from conftest import write_person, write_union


class TestScalars:
    def test_clean_scalar(self):
        assert clean_scalar(None) == ""
        assert clean_scalar("  Anne ") == "Anne"
        assert clean_scalar(' "quoted" ') == "quoted"
        assert clean_scalar(1926) == "1926"

    def test_clean_list(self):
        assert clean_list(None) == ()
        assert clean_list("Duke") == ("Duke",)
        assert clean_list([" Duke ", "", None, "Earl"]) == ("Duke", "Earl")


class TestFrontmatter:
    def test_without_frontmatter(self):
        assert split_frontmatter("Just a body\n") == ({}, "Just a body\n")

    def test_unclosed_frontmatter(self):
        text = "---\nfull_name: Anne\nno closing fence\n"
        assert split_frontmatter(text) == ({}, text)

    def test_data_and_body(self):
        data, body = split_frontmatter("---\nfull_name: Anne\nborn: 1950-08-15\n---\nNotes here\n")
        assert data["full_name"] == "Anne"
        assert body == "Notes here\n"


class TestReadCollection:
    def test_people_and_unions(self, royal_dir):
        collection = read_collection(royal_dir)

        assert len(collection.people) == 8
        assert len(collection.unions) == 3
        assert collection.warnings == []

        union = next(u for u in collection.unions if u.key == "elizabeth-philip")
        assert union.partner_refs == ("elizabeth.md", "philip.md")
        assert union.married == "1947-11-20"

    def test_nested_partner_refs_are_normalized(self, royal_dir):
        collection = read_collection(royal_dir)
        union = next(u for u in collection.unions if u.key == "elizabeth-philip/charles-diana")
        assert union.partner_refs == ("elizabeth-philip/charles.md", "elizabeth-philip/diana.md")
        assert union.ended_by == "divorce"

    def test_person_without_name_is_skipped(self, tmp_path):
        write_person(tmp_path, "nameless.md", None, born="1900")
        write_person(tmp_path, "named.md", "Named Person")
        collection = read_collection(tmp_path)
        assert [p.full_name for p in collection.people] == ["Named Person"]

    def test_unquoted_yaml_date(self, tmp_path):
        (tmp_path / "anne.md").write_text("---\nfull_name: Anne\nborn: 1950-08-15\n---\n", encoding="utf-8")
        person = read_collection(tmp_path).people[0]
        assert person.born == "1950-08-15"
        assert person.id == ""

    def test_impossible_dates_stay_text(self, tmp_path):
        (tmp_path / "ada.md").write_text(
            "---\nfull_name: Ada\nid: A\nborn: 1746-00-00\ndied: 1900-02-30\n---\n", encoding="utf-8"
        )
        person = read_collection(tmp_path).people[0]
        assert (person.born, person.died) == ("1746-00-00", "1900-02-30")

    def test_scalars_are_not_resolved(self, tmp_path):
        (tmp_path / "x.md").write_text("---\nfull_name: X\nid: 0123\ndied: no\n---\n", encoding="utf-8")
        person = read_collection(tmp_path).people[0]
        assert (person.id, person.died, person.deceased) == ("0123", "no", True)

    def test_fields_and_notes(self, tmp_path):
        write_person(
            tmp_path, "anne.md", "Anne Mountbatten", body="\nShe rides horses.\n",
            titles=["Princess Royal", ""], external_url=["https://example.org/anne"],
            birth_place="London",
        )
        person = read_collection(tmp_path).people[0]
        assert person.titles == ("Princess Royal",)
        assert person.external_urls == ("https://example.org/anne",)
        assert person.birth_place == "London"
        assert person.notes == "She rides horses."
        assert person.initials == "AM"

    def test_invalid_yaml_is_a_warning(self, tmp_path):
        (tmp_path / "bad.md").write_text("---\nfull_name: [unclosed\n---\n", encoding="utf-8")
        write_person(tmp_path, "good.md", "Good Person")
        collection = read_collection(tmp_path)
        assert [p.full_name for p in collection.people] == ["Good Person"]
        assert len(collection.warnings) == 1
        assert "bad.md" in collection.warnings[0]

    def test_union_ignores_malformed_partners(self, tmp_path):
        path = tmp_path / "u" / "_marriage.md"
        path.parent.mkdir()
        path.write_text("---\npartners:\n  - just text\n  - ref: ''\n  - ref: ../a.md\n---\n", encoding="utf-8")
        union = read_collection(tmp_path).unions[0]
        assert union.partner_refs == ("a.md",)


class TestPhotos:
    def test_remote_photo(self, tmp_path):
        path = write_person(tmp_path, "a.md", "A", photo="https://example.org/a.jpg")
        photo = resolve_photo(tmp_path, path, {"photo": "https://example.org/a.jpg"})
        assert photo.url == "https://example.org/a.jpg"
        assert photo.remote is True
        assert photo.source == "frontmatter"

    def test_explicit_local_photo(self, tmp_path):
        path = write_person(tmp_path, "family/a.md", "A")
        (tmp_path / "family" / "portrait.webp").write_bytes(b"img")
        photo = resolve_photo(tmp_path, path, {"photo": "portrait.webp"})
        assert photo.url == "family/portrait.webp"
        assert photo.remote is False
        assert photo.source == "frontmatter"

    def test_sibling_fallback_order(self, tmp_path):
        path = write_person(tmp_path, "family/a.md", "A")
        (tmp_path / "family" / "a.jpg").write_bytes(b"img")
        (tmp_path / "family" / "a.avif").write_bytes(b"img")
        photo = resolve_photo(tmp_path, path, {"photo": "missing.png"})
        assert photo.url == "family/a.jpg"
        assert photo.source == "sibling-fallback"

    def test_no_photo(self, tmp_path):
        path = write_person(tmp_path, "a.md", "A")
        photo = resolve_photo(tmp_path, path, {})
        assert photo.url is None
        assert photo.source == "none"


class TestIdentity:
    def test_assign_missing_ids_leaves_input_untouched(self):
        people = [Person(id="", key="a.md", full_name="A"), Person(id="keep", key="b.md", full_name="B")]
        with_ids, write_back = assign_missing_ids(people, id_factory=lambda: "new-id")

        assert [p.id for p in with_ids] == ["new-id", "keep"]
        assert write_back == [IdWriteBack(key="a.md", id="new-id")]
        assert people[0].id == ""

    def test_insert_after_full_name(self):
        text = "---\nborn: 1900\nfull_name: A\ntitles:\n  - Earl\n---\nBody\n"
        assert insert_id(text, "X") == "---\nborn: 1900\nfull_name: A\nid: X\ntitles:\n  - Earl\n---\nBody\n"

    def test_insert_without_frontmatter(self):
        assert insert_id("Body only\n", "X") == "---\nid: X\n---\n\nBody only\n"

    def test_write_back_is_idempotent(self, tmp_path):
        path = write_person(tmp_path, "a.md", "A", body="Notes\n")

        assert write_back_ids(tmp_path, [IdWriteBack("a.md", "first")]) == []
        assert write_back_ids(tmp_path, [IdWriteBack("a.md", "second")]) == []

        text = path.read_text(encoding="utf-8")
        assert "id: first" in text
        assert "second" not in text
        assert text.endswith("Notes\n")
        assert read_collection(tmp_path).people[0].id == "first"

    def test_write_back_with_partial_date(self, tmp_path):
        path = tmp_path / "a.md"
        path.write_text("---\nfull_name: A\nborn: 1746-00-00\n---\n", encoding="utf-8")

        assert write_back_ids(tmp_path, [IdWriteBack("a.md", "X")]) == []
        assert path.read_text(encoding="utf-8") == "---\nfull_name: A\nid: X\nborn: 1746-00-00\n---\n"

    def test_write_failure_is_a_warning(self, tmp_path):
        warnings = write_back_ids(tmp_path, [IdWriteBack("missing/a.md", "X")])
        assert len(warnings) == 1
        assert "missing/a.md" in warnings[0]


def test_union_records_carry_metadata(tmp_path):
    write_union(tmp_path, "a-b", ["../a.md", "../b.md"], married="1900", married_place="York",
                notes="Second marriage")
    union = read_collection(tmp_path).unions[0]
    assert union.key == "a-b"
    assert union.married_place == "York"
    assert union.notes == "Second marriage"
