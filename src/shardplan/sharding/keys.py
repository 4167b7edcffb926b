"""Dotted test-key helpers.

All functions are total over arbitrary strings.
"""

from __future__ import annotations

_SEPARATOR = "."
_PARAMETER_OPEN = "("


def deparameterize(key: str) -> str:
    """Drop the parameter suffix, starting at the first ``(``.

    ``Ns.Class.Method(1, "a")`` becomes ``Ns.Class.Method``.
    """
    head, _, _ = key.partition(_PARAMETER_OPEN)
    return head


def up_key(key: str) -> str:
    """Return the parent of *key* in the dotted hierarchy.

    A key without a dot is returned unchanged; callers must treat
    ``up_key(k) == k`` as "cannot go further up".
    """
    tokens = key.split(_SEPARATOR)
    if len(tokens) == 1:
        return key
    return _SEPARATOR.join(tokens[:-1])


def is_in_subtree(key: str, prefix: str) -> bool:
    """Return True when *key* is *prefix* itself or lies below it."""
    return key == prefix or key.startswith(prefix + _SEPARATOR)
