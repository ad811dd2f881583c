"""Tests for docspine.core.entity -- identity normalization."""

import uuid

import pytest

from docspine.core.entity import ID_KEY, generate_uid, has_identity, normalize_entity


class TestGenerateUid:
    def test_is_uuid4_string(self):
        value = generate_uid()
        assert uuid.UUID(value).version == 4

    def test_unique(self):
        assert generate_uid() != generate_uid()


class TestHasIdentity:
    @pytest.mark.parametrize("value", [None, ""])
    def test_absent(self, value):
        assert has_identity(value) is False

    @pytest.mark.parametrize("value", ["a1", 0, 42, False])
    def test_present(self, value):
        assert has_identity(value) is True


class TestNormalizeEntity:
    def test_generates_missing_id(self):
        entity = normalize_entity({"title": "x"}, uid_factory=lambda: "gen-1")
        assert entity == {"title": "x", ID_KEY: "gen-1"}

    @pytest.mark.parametrize("empty", [None, ""])
    def test_generates_for_empty_id(self, empty):
        entity = normalize_entity({ID_KEY: empty, "title": "x"}, uid_factory=lambda: "gen-1")
        assert entity[ID_KEY] == "gen-1"

    def test_keeps_existing_id(self):
        entity = normalize_entity({ID_KEY: "given", "title": "x"})
        assert entity[ID_KEY] == "given"

    def test_zero_is_a_valid_id(self):
        assert normalize_entity({ID_KEY: 0})[ID_KEY] == 0

    def test_moves_custom_id_field(self):
        entity = normalize_entity({"uuid": "a1", "title": "x"}, id_field="uuid")
        assert entity == {"title": "x", ID_KEY: "a1"}

    def test_generates_under_custom_field(self):
        entity = normalize_entity({"title": "x"}, id_field="uuid", uid_factory=lambda: "gen-2")
        assert entity == {"title": "x", ID_KEY: "gen-2"}

    def test_input_is_not_mutated(self):
        doc = {"uuid": "a1", "author": {"name": "B"}}
        entity = normalize_entity(doc, id_field="uuid")
        entity["author"]["name"] = "changed"

        assert doc == {"uuid": "a1", "author": {"name": "B"}}

    def test_default_factory_used(self):
        entity = normalize_entity({})
        assert uuid.UUID(entity[ID_KEY])
