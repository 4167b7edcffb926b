"""Tests for shardplan.sharding.keys."""

from __future__ import annotations

import pytest

from shardplan.sharding.keys import deparameterize, is_in_subtree, up_key


class TestDeparameterize:
    def test_strips_parameter_suffix(self) -> None:
        assert deparameterize("Ns.Class.Method(1,2)") == "Ns.Class.Method"

    def test_strips_from_first_paren(self) -> None:
        assert deparameterize('Ns.Class.Method("a(b)", x.y)') == "Ns.Class.Method"

    def test_no_paren_unchanged(self) -> None:
        assert deparameterize("Ns.Class.Method") == "Ns.Class.Method"

    def test_only_parameters(self) -> None:
        assert deparameterize("(1)") == ""

    def test_empty(self) -> None:
        assert deparameterize("") == ""


class TestUpKey:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("A.B.C", "A.B"),
            ("A.B", "A"),
            ("A", "A"),
            ("", ""),
            ("A.", "A"),
            (".A", ""),
        ],
    )
    def test_parent(self, key: str, expected: str) -> None:
        assert up_key(key) == expected

    def test_dotless_key_is_fixed_point(self) -> None:
        assert up_key(up_key("Standalone")) == "Standalone"


class TestIsInSubtree:
    def test_self(self) -> None:
        assert is_in_subtree("A.B", "A.B")

    def test_descendant(self) -> None:
        assert is_in_subtree("A.B.C.D", "A.B")

    def test_sibling_with_shared_prefix(self) -> None:
        assert not is_in_subtree("A.BC.D", "A.B")

    def test_ancestor_is_not_inside(self) -> None:
        assert not is_in_subtree("A", "A.B")
