"""Tests for sync/patterns.py: glob exclusion with ``!`` negation."""

import pytest

from workspace_sync.sync.patterns import PatternMatcher


class TestIsExcluded:
    """Tests for PatternMatcher.is_excluded()."""

    @pytest.mark.parametrize(
        "patterns",
        [
            ["editor.*", "!editor.fontSize"],
            ["!editor.fontSize", "editor.*"],
        ],
    )
    def test_negation_wins_regardless_of_order(self, patterns):
        matcher = PatternMatcher(patterns)

        assert matcher.is_excluded("editor.fontSize") is False
        assert matcher.is_excluded("editor.tabSize") is True

    def test_no_patterns_excludes_nothing(self):
        assert PatternMatcher().is_excluded("editor.fontSize") is False

    def test_negation_only_excludes_nothing(self):
        matcher = PatternMatcher(["!editor.fontSize"])

        assert matcher.is_excluded("editor.fontSize") is False
        assert matcher.is_excluded("terminal.fontSize") is False

    def test_exact_key(self):
        matcher = PatternMatcher(["files.exclude"])

        assert matcher.is_excluded("files.exclude") is True
        assert matcher.is_excluded("files.excludeGitIgnore") is False

    def test_star_crosses_dots(self):
        matcher = PatternMatcher(["editor*"])

        assert matcher.is_excluded("editor.font.size") is True
        assert matcher.is_excluded("editor") is True
        assert matcher.is_excluded("terminal.editor") is False

    def test_question_mark_matches_one_character(self):
        matcher = PatternMatcher(["a.?"])

        assert matcher.is_excluded("a.b") is True
        assert matcher.is_excluded("a.bc") is False

    def test_brace_alternatives(self):
        matcher = PatternMatcher(["{editor,files}.*"])

        assert matcher.is_excluded("editor.tabSize") is True
        assert matcher.is_excluded("files.exclude") is True
        assert matcher.is_excluded("search.exclude") is False

    def test_matching_is_case_sensitive(self):
        matcher = PatternMatcher(["Editor.*"])

        assert matcher.is_excluded("editor.tabSize") is False

    def test_non_string_entries_ignored(self):
        matcher = PatternMatcher([1, None, {"a": 1}, "terminal.*"])

        assert matcher.is_excluded("terminal.shell") is True
        assert matcher.is_excluded("editor.tabSize") is False

    def test_malformed_pattern_never_raises(self):
        matcher = PatternMatcher(["[z-a]", "[", "terminal.*"])

        assert matcher.is_excluded("z") is False
        assert matcher.is_excluded("terminal.shell") is True


class TestFilterSettings:
    """Tests for PatternMatcher.filter_settings()."""

    def test_drops_excluded_top_level_keys(self):
        matcher = PatternMatcher(["editor.*", "!editor.fontSize"])
        settings = {
            "editor.tabSize": 2,
            "editor.fontSize": 14,
            "files.exclude": {"editor.x": True},
        }

        result = matcher.filter_settings(settings)

        assert result == {
            "editor.fontSize": 14,
            "files.exclude": {"editor.x": True},
        }

    def test_does_not_mutate_input(self):
        settings = {"editor.tabSize": 2}

        PatternMatcher(["editor.*"]).filter_settings(settings)

        assert settings == {"editor.tabSize": 2}
