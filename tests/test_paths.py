"""Tests for document path addressing."""

import pytest

from arete.utils.paths import PathSegment, get_value, merge_unique, parse_path, set_value


class TestParsePath:
    def test_plain_segments(self):
        assert parse_path("profile.careerSummary") == [
            PathSegment("profile"),
            PathSegment("careerSummary"),
        ]

    def test_indexed_segment(self):
        assert parse_path("experience[2].achievements") == [
            PathSegment("experience", 2),
            PathSegment("achievements"),
        ]

    @pytest.mark.parametrize("path", ["", "a..b", "a[x]", "a[-1]", "a[0", "a.b c"])
    def test_malformed_raises(self, path):
        with pytest.raises(ValueError):
            parse_path(path)


class TestGetValue:
    def test_nested_field(self, sample_document):
        assert get_value(sample_document, "profile.fullName") == "Jane Doe"

    def test_array_element(self, sample_document):
        assert get_value(sample_document, "experience[1].company") == "Globex"

    def test_missing_returns_default(self, sample_document):
        assert get_value(sample_document, "profile.phone") is None
        assert get_value(sample_document, "experience[9].company", "n/a") == "n/a"
        assert get_value(sample_document, "skills.technical[0].name") is None

    def test_index_into_non_list(self, sample_document):
        assert get_value(sample_document, "profile[0]") is None

    def test_malformed_path_returns_default(self, sample_document):
        assert get_value(sample_document, "experience[", "fallback") == "fallback"

    def test_none_document(self):
        assert get_value(None, "profile.fullName") is None

    def test_explicit_none_is_absent(self):
        assert get_value({"profile": {"phone": None}}, "profile.phone", "x") == "x"


class TestSetValue:
    def test_round_trip(self, sample_document):
        updated = set_value(sample_document, "experience[0].achievements", ["A.", "B."])
        assert get_value(updated, "experience[0].achievements") == ["A.", "B."]

    def test_input_not_mutated(self, sample_document):
        before = sample_document["experience"][0]["achievements"]
        set_value(sample_document, "experience[0].achievements", ["New."])
        assert sample_document["experience"][0]["achievements"] is before
        assert before == ["Built the billing API."]

    def test_untouched_branches_are_shared(self, sample_document):
        updated = set_value(sample_document, "experience[0].position", "Staff Engineer")
        assert updated is not sample_document
        assert updated["experience"] is not sample_document["experience"]
        assert updated["profile"] is sample_document["profile"]
        assert updated["experience"][1] is sample_document["experience"][1]

    def test_creates_missing_containers(self):
        updated = set_value({}, "profile.careerSummary", "Hello")
        assert updated == {"profile": {"careerSummary": "Hello"}}

    def test_pads_list_with_empty_objects(self):
        updated = set_value({"experience": []}, "experience[2].company", "Initech")
        assert updated["experience"] == [{}, {}, {"company": "Initech"}]

    def test_none_document_starts_empty(self):
        assert set_value(None, "skills.technical", ["Go"]) == {"skills": {"technical": ["Go"]}}

    def test_malformed_path_raises(self, sample_document):
        with pytest.raises(ValueError):
            set_value(sample_document, "experience[x]", 1)


class TestMergeUnique:
    def test_appends_unseen_items_in_order(self):
        assert merge_unique(["a", "b"], ["b", "c", "a", "d"]) == ["a", "b", "c", "d"]

    def test_none_inputs(self):
        assert merge_unique(None, ["x"]) == ["x"]
        assert merge_unique(["x"], None) == ["x"]
        assert merge_unique(None, None) == []

    def test_dedupes_existing(self):
        assert merge_unique(["a", "a"], []) == ["a"]
