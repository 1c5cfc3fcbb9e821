"""Built-in operator table."""

from typing import Any, Callable, Optional

from . import comparator
from .models import Operator


Predicate = Callable[[Any, Any], bool]


BUILTIN_OPERATORS: dict[str, Predicate] = {
    Operator.EQUAL.value: comparator.equal,
    Operator.NOT_EQUAL.value: lambda a, b: not comparator.equal(a, b),
    Operator.GREATER_THAN.value: comparator.greater_than,
    Operator.LESS_THAN.value: comparator.less_than,
    Operator.GREATER_THAN_INCLUSIVE.value: comparator.greater_than_or_equal,
    Operator.LESS_THAN_INCLUSIVE.value: comparator.less_than_or_equal,
    Operator.IN.value: comparator.contained_in,
    Operator.NOT_IN.value: lambda a, b: not comparator.contained_in(a, b),
    Operator.CONTAINS.value: comparator.contains,
    Operator.NOT_CONTAINS.value: lambda a, b: not comparator.contains(a, b),
    Operator.REGEX.value: comparator.matches_pattern,
    # Null checks look only at the fact value
    Operator.IS_NULL.value: lambda a, _: a is None,
    Operator.IS_NOT_NULL.value: lambda a, _: a is not None,
}


def is_builtin(name: str) -> bool:
    return name in BUILTIN_OPERATORS


def get_builtin(name: str) -> Optional[Predicate]:
    return BUILTIN_OPERATORS.get(name)
