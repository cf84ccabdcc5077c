"""Glob-based settings key exclusion with ``!`` negation.

Patterns starting with ``!`` are *negations*: a key matching any of them is
never excluded, however many plain patterns also match it.  All other
patterns are *exclusions*.

Matching uses ``fnmatch`` semantics applied to the whole key, so ``*`` crosses
dot boundaries (``editor*`` matches ``editor.fontSize``) and ``**`` behaves the
same way.  ``{a,b}`` alternatives are expanded before translation.  Matching
is case-sensitive.

Examples::

    matcher = PatternMatcher(["editor.*", "!editor.fontSize"])
    matcher.is_excluded("editor.tabSize")   # True
    matcher.is_excluded("editor.fontSize")  # False
"""

from __future__ import annotations

import fnmatch
import logging
import re
from typing import Any, Iterable

logger = logging.getLogger(__name__)

# Innermost ``{...}`` group that contains at least one comma.
_BRACE_GROUP = re.compile(r"\{([^{}]*,[^{}]*)\}")


def _expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives into separate patterns."""
    match = _BRACE_GROUP.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(_expand_braces(head + option + tail))
    return expanded


def _compile(pattern: str) -> list[re.Pattern[str]]:
    """Compile *pattern* to regexes; an unusable pattern yields none."""
    compiled: list[re.Pattern[str]] = []
    for variant in _expand_braces(pattern):
        try:
            compiled.append(re.compile(fnmatch.translate(variant)))
        except re.error as exc:
            logger.debug("Ignoring invalid pattern %r: %s", pattern, exc)
            return []
    return compiled


class PatternMatcher:
    """Decide whether settings keys are excluded by a pattern set.

    Args:
        patterns: Ordered glob patterns; entries prefixed with ``!`` are
            negations.  Non-string entries are ignored.
    """

    def __init__(self, patterns: Iterable[Any] = ()) -> None:
        self._negations: list[re.Pattern[str]] = []
        self._exclusions: list[re.Pattern[str]] = []

        for pattern in patterns:
            if not isinstance(pattern, str):
                continue
            if pattern.startswith("!"):
                self._negations.extend(_compile(pattern[1:]))
            else:
                self._exclusions.extend(_compile(pattern))

    def is_excluded(self, key: str) -> bool:
        """Return ``True`` if *key* is excluded.

        A negation match always wins over an exclusion match.
        """
        if any(rx.match(key) for rx in self._negations):
            return False
        return any(rx.match(key) for rx in self._exclusions)

    def filter_settings(self, settings: dict[str, Any]) -> dict[str, Any]:
        """Return a new mapping holding only the non-excluded top-level keys.

        Values are passed through as-is; nested keys are not filtered.
        """
        return {
            key: value
            for key, value in settings.items()
            if not self.is_excluded(key)
        }
