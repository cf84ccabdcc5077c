"""Tests for sync/merger.py: deep merge, diff and structural equality.

Covers:
- merge() null deletion, recursive mapping merge, array replacement
- diff() changed, added and removed keys
- the merge/diff duality used by reverse sync
- deep_equal() type strictness
"""

import copy

import pytest

from workspace_sync.sync.merger import deep_equal, diff, merge

SAMPLES = [
    {},
    {"a": 1},
    {"a": {"b": {"c": [1, 2, {"d": True}]}}, "e": "x"},
    {"files.exclude": {"**/.git": True, "**/node_modules": False}},
]


# ---------------------------------------------------------------------------
# merge tests
# ---------------------------------------------------------------------------


class TestMerge:
    """Tests for merge()."""

    @pytest.mark.parametrize("base", SAMPLES)
    def test_empty_override_is_identity(self, base):
        assert merge(base, {}) == base

    def test_null_removes_top_level_key(self):
        assert merge({"a": 1, "b": 2}, {"a": None}) == {"b": 2}

    def test_null_removes_nested_key(self):
        base = {"b": {"x": 1, "y": {"deep": 1, "keep": 2}}}
        override = {"b": {"y": {"deep": None}}}

        assert merge(base, override) == {"b": {"x": 1, "y": {"keep": 2}}}

    def test_null_for_missing_key_is_noop(self):
        assert merge({"a": 1}, {"zzz": None}) == {"a": 1}

    def test_arrays_are_replaced(self):
        assert merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_scalar_replaces_mapping(self):
        assert merge({"a": {"x": 1}}, {"a": 5}) == {"a": 5}

    def test_mapping_replaces_scalar(self):
        assert merge({"a": 5}, {"a": {"x": 1}}) == {"a": {"x": 1}}

    def test_mappings_merge_recursively(self):
        base = {"files.exclude": {"**/.git": True}}
        override = {"files.exclude": {"**/dist": True}}

        assert merge(base, override) == {
            "files.exclude": {"**/.git": True, "**/dist": True}
        }

    def test_inputs_not_mutated(self):
        base = {"a": {"b": [1]}}
        override = {"a": {"c": 2}, "d": None}
        base_copy = copy.deepcopy(base)
        override_copy = copy.deepcopy(override)

        result = merge(base, override)
        result["a"]["b"].append(99)

        assert base == base_copy
        assert override == override_copy

    def test_result_does_not_alias_override(self):
        override = {"a": {"nested": [1]}}

        result = merge({}, override)
        result["a"]["nested"].append(2)

        assert override == {"a": {"nested": [1]}}


# ---------------------------------------------------------------------------
# diff tests
# ---------------------------------------------------------------------------


class TestDiff:
    """Tests for diff()."""

    def test_identical_trees_give_empty_patch(self):
        tree = {"a": 1, "b": {"c": [1, 2]}}
        assert diff(tree, copy.deepcopy(tree)) == {}

    def test_changed_value(self):
        assert diff({"a": 1}, {"a": 2}) == {"a": 2}

    def test_added_key(self):
        assert diff({"a": 1}, {"a": 1, "b": True}) == {"b": True}

    def test_removed_key_maps_to_none(self):
        assert diff({"a": 1, "b": 2}, {"a": 1}) == {"b": None}

    def test_nested_change_reported_at_top_level(self):
        expected = {"files.exclude": {"a": True, "b": True}}
        current = {"files.exclude": {"a": True, "b": False}}

        assert diff(expected, current) == {
            "files.exclude": {"a": True, "b": False}
        }

    def test_bool_and_number_differ(self):
        assert diff({"a": 1}, {"a": True}) == {"a": True}

    @pytest.mark.parametrize(
        "expected,current",
        [
            ({"a": 1, "b": 2}, {"a": 1}),
            ({"a": 1}, {"a": 1, "c": {"d": [1]}}),
            ({"x": {"y": 1}}, {"x": {"y": 2}, "z": "new"}),
            ({}, {"only": "current"}),
        ],
    )
    def test_merge_of_diff_reproduces_current(self, expected, current):
        assert merge(expected, diff(expected, current)) == current

    def test_diff_of_merge_reproduces_patch(self):
        expected = {"a": 1, "b": {"c": 2}}
        patch = {"a": 5, "new": [1, 2]}

        assert diff(expected, merge(expected, patch)) == patch


# ---------------------------------------------------------------------------
# deep_equal tests
# ---------------------------------------------------------------------------


class TestDeepEqual:
    """Tests for deep_equal()."""

    def test_dict_key_order_ignored(self):
        assert deep_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_list_order_matters(self):
        assert not deep_equal([1, 2], [2, 1])

    def test_true_is_not_one(self):
        assert not deep_equal(True, 1)
        assert not deep_equal(0, False)

    def test_int_equals_float(self):
        assert deep_equal(1, 1.0)

    def test_none_equals_none(self):
        assert deep_equal(None, None)
        assert not deep_equal(None, {})

    def test_list_vs_dict(self):
        assert not deep_equal([], {})

    def test_nested_structures(self):
        a = {"x": [{"y": True}, 2], "z": None}
        assert deep_equal(a, copy.deepcopy(a))
        assert not deep_equal(a, {"x": [{"y": 1}, 2], "z": None})
