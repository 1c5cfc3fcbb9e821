"""Rule, condition and event definitions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Operator(str, Enum):
    """Built-in operator identifiers as they appear in rule documents."""
    EQUAL = "equal"
    NOT_EQUAL = "notEqual"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_INCLUSIVE = "greaterThanInclusive"
    LESS_THAN_INCLUSIVE = "lessThanInclusive"
    IN = "in"
    NOT_IN = "notIn"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    REGEX = "regex"
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"


class LogicalOperator(str, Enum):
    """Operators that combine the children of a condition group."""
    AND = "and"
    OR = "or"


def _operator_name(op: Any) -> Any:
    # Store the plain wire string so custom ids and enum members compare alike
    return op.value if isinstance(op, Enum) else op


@dataclass(frozen=True)
class Condition:
    """A leaf predicate over one fact."""
    fact: str
    operator: str
    value: Any = None

    def __post_init__(self):
        object.__setattr__(self, "operator", _operator_name(self.operator))


@dataclass(frozen=True)
class ConditionGroup:
    """A logical combination of conditions and nested groups."""
    operator: str = LogicalOperator.AND.value
    conditions: tuple["Node", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "operator", _operator_name(self.operator))
        object.__setattr__(self, "conditions", tuple(self.conditions))

    def __len__(self) -> int:
        return len(self.conditions)


Node = Union[Condition, ConditionGroup]


@dataclass(frozen=True)
class Event:
    """Opaque payload emitted when a rule matches."""
    type: str
    params: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class Rule:
    """A condition tree paired with the event it emits."""
    id: str
    name: str = ""
    priority: int = 0
    conditions: ConditionGroup = field(default_factory=ConditionGroup)
    event: Event = field(default_factory=lambda: Event(type=""))

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", self.id)


def all_of(*conditions: Node) -> ConditionGroup:
    """Build an AND group."""
    return ConditionGroup(LogicalOperator.AND, conditions)


def any_of(*conditions: Node) -> ConditionGroup:
    """Build an OR group."""
    return ConditionGroup(LogicalOperator.OR, conditions)
