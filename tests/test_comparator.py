"""Tests for value comparison primitives."""

import math
import os
import sys
from decimal import Decimal
from fractions import Fraction

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from json_rules_engine.rules import comparator
from json_rules_engine.rules.comparator import ValueKind, kind_of


class TestValueKind:
    """Test value classification."""

    @pytest.mark.parametrize("value,kind", [
        (None, ValueKind.NULL),
        (True, ValueKind.BOOLEAN),
        (0, ValueKind.NUMBER),
        (2.5, ValueKind.NUMBER),
        (Decimal("1.5"), ValueKind.NUMBER),
        (Fraction(1, 3), ValueKind.NUMBER),
        ("x", ValueKind.STRING),
        ([1], ValueKind.SEQUENCE),
        ((1,), ValueKind.SEQUENCE),
        ({"a": 1}, ValueKind.MAPPING),
        ({1, 2}, ValueKind.OTHER),
    ])
    def test_kind_of(self, value, kind):
        assert kind_of(value) is kind

    def test_bool_is_not_numeric(self):
        """bool subclasses int but must not be treated as a number."""
        assert not comparator.is_numeric(True)
        assert not comparator.equal(True, 1)
        assert not comparator.greater_than(True, 0)


class TestEqual:
    """Test cross-type equality."""

    def test_nulls(self):
        assert comparator.equal(None, None)
        assert not comparator.equal(None, 0)
        assert not comparator.equal("", None)

    def test_numeric_across_types(self):
        """Numbers of any type compare by float value."""
        assert comparator.equal(1, 1.0)
        assert comparator.equal(Decimal("2.5"), 2.5)
        assert comparator.equal(Fraction(1, 2), 0.5)
        assert not comparator.equal(1, 2)

    def test_strings_and_booleans(self):
        assert comparator.equal("US", "US")
        assert not comparator.equal("US", "us")
        assert comparator.equal(False, False)
        assert not comparator.equal(True, False)

    def test_number_and_string_never_equal(self):
        assert not comparator.equal(1, "1")

    def test_structural(self):
        """Sequences and mappings compare element by element."""
        assert comparator.equal([1, "a", None], [1.0, "a", None])
        assert comparator.equal([1, 2], (1, 2))
        assert not comparator.equal([1, 2], [1, 2, 3])
        assert comparator.equal({"a": [1, {"b": 2}]}, {"a": [1.0, {"b": 2.0}]})
        assert not comparator.equal({"a": 1}, {"b": 1})
        assert not comparator.equal([True], [1])

    @pytest.mark.parametrize("value", [0, -3.5, "", "text", True, False, None, [1, [2]], {"k": "v"}])
    def test_reflexive(self, value):
        assert comparator.equal(value, value)

    def test_nan_compares_equal(self):
        """NaN is neither less nor greater, so it compares as equal."""
        assert comparator.equal(math.nan, math.nan)

    def test_huge_integers_coerce_to_float(self):
        """Integers beyond 2**53 lose precision."""
        assert comparator.equal(2 ** 53, 2 ** 53 + 1)
        assert comparator.numeric_compare(10 ** 400, 1e308) == 1
        assert comparator.numeric_compare(-(10 ** 400), 0) == -1


class TestOrdering:
    """Test ordering operators."""

    def test_numeric_only(self):
        assert comparator.greater_than(20, 18)
        assert comparator.less_than(1.5, 2)
        assert not comparator.greater_than("b", "a")
        assert not comparator.less_than("a", 1)
        assert not comparator.greater_than(None, 1)

    def test_inclusive_reuses_equal(self):
        """Equal strings satisfy the inclusive operators but not the strict ones."""
        assert comparator.greater_than_or_equal("a", "a")
        assert comparator.less_than_or_equal("a", "a")
        assert not comparator.greater_than("a", "a")
        assert not comparator.greater_than_or_equal("b", "a")

    @pytest.mark.parametrize("a,b", [(1, 2), (2, 1), (3, 3), (2.5, 2), (-1, -1.0)])
    def test_inclusive_matches_definition(self, a, b):
        assert comparator.greater_than_or_equal(a, b) == (
            comparator.greater_than(a, b) or comparator.equal(a, b)
        )
        assert comparator.less_than_or_equal(a, b) == (
            comparator.less_than(a, b) or comparator.equal(a, b)
        )

    def test_numeric_compare(self):
        assert comparator.numeric_compare(1, 2) == -1
        assert comparator.numeric_compare(2, 2.0) == 0
        assert comparator.numeric_compare(3, 2) == 1


class TestMembership:
    """Test in/contains semantics."""

    def test_contained_in(self):
        assert comparator.contained_in("apple", ["banana", "apple", "orange"])
        assert comparator.contained_in(2, [1.0, 2.0])
        assert not comparator.contained_in("kiwi", ["banana", "apple"])

    def test_contained_in_requires_sequence(self):
        assert not comparator.contained_in("a", "abc")
        assert not comparator.contained_in("a", {"a": 1})
        assert not comparator.contained_in("a", None)

    def test_contains(self):
        assert comparator.contains("hello world", "world")
        assert not comparator.contains("hello", 1)
        assert comparator.contains(["a", "b"], "b")
        assert not comparator.contains(42, 4)


class TestPattern:
    """Test regex matching."""

    def test_search_is_unanchored(self):
        assert comparator.matches_pattern("order-1234", r"\d{4}")
        assert not comparator.matches_pattern("order", r"^\d+$")

    def test_invalid_pattern_does_not_match(self):
        assert not comparator.matches_pattern("abc", "(unclosed")

    def test_non_string_operands(self):
        assert not comparator.matches_pattern(123, r"\d+")
        assert not comparator.matches_pattern("123", 5)
