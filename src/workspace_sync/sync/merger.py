"""Deep merge and deep diff over JSON-like settings trees.

Merge rules (``merge(base, override)``):

* ``None`` in the override **removes** the key from the result.
* Two mappings are merged key by key, recursively.
* Anything else (arrays, scalars, mapping-over-scalar and the reverse)
  **replaces** the base value with a deep copy.

``diff(expected, current)`` is the dual operation used by reverse sync: it
returns the patch that turns *expected* into *current*, using ``None`` to
mark keys that *current* no longer has.  For any two trees::

    merge(expected, diff(expected, current)) == current

Neither function mutates its inputs.
"""

from __future__ import annotations

import copy
from typing import Any

Settings = dict[str, Any]


def merge(base: Settings, override: Settings) -> Settings:
    """Deep-merge *override* on top of *base*.

    Args:
        base: Base settings (e.g. root workspace settings).
        override: Settings applied on top (e.g. a folder override).

    Returns:
        A new merged settings dict.
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if value is None:
            result.pop(key, None)
        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def diff(expected: Settings, current: Settings) -> Settings:
    """Return the top-level keys of *current* that differ from *expected*.

    Args:
        expected: What forward sync would produce for the folder.
        current: What the folder's settings artifact actually holds.

    Returns:
        A patch dict.  Changed or added keys map to a copy of the current
        value; keys present only in *expected* map to ``None``.
    """
    patch: Settings = {}

    for key, current_value in current.items():
        if key not in expected or not deep_equal(
            current_value, expected[key]
        ):
            patch[key] = copy.deepcopy(current_value)

    for key in expected:
        if key not in current:
            patch[key] = None

    return patch


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality for JSON values.

    Booleans and numbers never compare equal to each other, so ``True`` and
    ``1`` are different settings values.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b

    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[k], b[k]) for k in a)

    if isinstance(a, list) and isinstance(b, list):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, (dict, list)) or isinstance(b, (dict, list)):
        return False

    return a == b
