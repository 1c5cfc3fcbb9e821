"""
Type-aware comparison primitives for condition evaluation.

Every operand is first classified into a closed set of value kinds and the
comparison semantics are picked from the pair of kinds. Ordering is only
defined between numbers; all numbers are compared as 64-bit floats, so
integers beyond 2**53 may compare equal to their neighbours.
"""

import math
import numbers
import re
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """Closed classification of fact and condition values."""
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OTHER = "other"


def kind_of(value: Any) -> ValueKind:
    """Classify a value. bool is checked before numbers since it subclasses int."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (numbers.Real, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def is_numeric(value: Any) -> bool:
    return kind_of(value) is ValueKind.NUMBER


def to_float(value: Any) -> float:
    """Coerce a number to a 64-bit float; oversized ints saturate to infinity."""
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def numeric_compare(a: Any, b: Any) -> int:
    """
    Compare two numbers as floats.

    Returns -1, 0 or 1. NaN is neither less nor greater than anything, so it
    compares as 0.
    """
    fa = to_float(a)
    fb = to_float(b)
    if fa < fb:
        return -1
    if fa > fb:
        return 1
    return 0


def equal(a: Any, b: Any) -> bool:
    """Cross-type equality used by equal/notEqual/in and the inclusive orderings."""
    ka = kind_of(a)
    kb = kind_of(b)

    if ka is ValueKind.NULL or kb is ValueKind.NULL:
        return ka is kb

    if ka is not kb:
        return False

    if ka is ValueKind.NUMBER:
        return numeric_compare(a, b) == 0

    if ka in (ValueKind.STRING, ValueKind.BOOLEAN):
        return a == b

    if ka is ValueKind.SEQUENCE:
        return len(a) == len(b) and all(equal(x, y) for x, y in zip(a, b))

    if ka is ValueKind.MAPPING:
        if set(a.keys()) != set(b.keys()):
            return False
        return all(equal(a[key], b[key]) for key in a)

    return bool(a == b)


def greater_than(a: Any, b: Any) -> bool:
    if is_numeric(a) and is_numeric(b):
        return numeric_compare(a, b) > 0
    return False


def less_than(a: Any, b: Any) -> bool:
    if is_numeric(a) and is_numeric(b):
        return numeric_compare(a, b) < 0
    return False


def greater_than_or_equal(a: Any, b: Any) -> bool:
    """greater_than OR equal; equal non-numeric values also satisfy it."""
    return greater_than(a, b) or equal(a, b)


def less_than_or_equal(a: Any, b: Any) -> bool:
    """less_than OR equal; equal non-numeric values also satisfy it."""
    return less_than(a, b) or equal(a, b)


def contained_in(value: Any, collection: Any) -> bool:
    """True if some item of a list/tuple is equal() to value."""
    if kind_of(collection) is not ValueKind.SEQUENCE:
        return False
    return any(equal(value, item) for item in collection)


def contains(container: Any, item: Any) -> bool:
    """Substring test for strings, membership test for lists/tuples."""
    kind = kind_of(container)
    if kind is ValueKind.STRING:
        return isinstance(item, str) and item in container
    if kind is ValueKind.SEQUENCE:
        return contained_in(item, container)
    return False


def matches_pattern(value: Any, pattern: Any) -> bool:
    """Unanchored regex search; an invalid pattern never matches."""
    if not isinstance(value, str) or not isinstance(pattern, str):
        return False
    try:
        return re.search(pattern, value) is not None
    except re.error:
        return False
