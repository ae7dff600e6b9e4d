"""Unit tests for dot-path configuration access."""

import pytest

from loontijdvak.config_tree import ABSENT, get_path, is_present, set_path, split_path


class TestGetPath:
    def test_nested_value(self):
        tree = {"vehicle": {"catalogValue": 45000}}
        assert get_path(tree, "vehicle.catalogValue") == 45000

    def test_missing_segment_is_absent(self):
        assert get_path({"vehicle": {}}, "vehicle.catalogValue") is ABSENT
        assert get_path({}, "a.b.c") is ABSENT

    def test_non_mapping_intermediate_is_absent(self):
        assert get_path({"vehicle": "sedan"}, "vehicle.catalogValue") is ABSENT

    def test_null_is_distinct_from_absent(self):
        value = get_path({"vehicle": None}, "vehicle")
        assert value is None
        assert value is not ABSENT

    def test_falsy_values_are_present(self):
        tree = {"count": 0, "flag": False, "name": ""}
        assert is_present(get_path(tree, "count"))
        assert is_present(get_path(tree, "flag"))
        assert is_present(get_path(tree, "name"))

    def test_absent_and_null_are_not_present(self):
        assert not is_present(ABSENT)
        assert not is_present(None)


class TestSetPath:
    def test_creates_intermediate_mappings(self):
        tree = {}
        set_path(tree, "car.details.catalogValue", 30000)
        assert tree == {"car": {"details": {"catalogValue": 30000}}}

    def test_keeps_sibling_keys(self):
        tree = {"car": {"plate": "PA-01"}}
        set_path(tree, "car.catalogValue", 30000)
        assert tree == {"car": {"plate": "PA-01", "catalogValue": 30000}}

    def test_replaces_non_mapping_intermediate(self):
        tree = {"car": "sedan"}
        set_path(tree, "car.catalogValue", 30000)
        assert tree == {"car": {"catalogValue": 30000}}

    def test_single_segment(self):
        tree = {}
        set_path(tree, "rentalValue", 1200)
        assert tree == {"rentalValue": 1200}


class TestSplitPath:
    @pytest.mark.parametrize("path", ["", ".", "a..b", "a.", ".a"])
    def test_rejects_empty_segments(self, path):
        with pytest.raises(ValueError):
            split_path(path)

    def test_splits_on_dots(self):
        assert split_path("a.b.c") == ["a", "b", "c"]
