"""Rules engine module."""

from .engine import RulesEngine, RuleEvaluationResult
from .evaluator import ConditionEvaluator
from .registry import OperatorRegistry
from .store import RuleStore
from .models import (
    Condition,
    ConditionGroup,
    Event,
    LogicalOperator,
    Operator,
    Rule,
    all_of,
    any_of,
)

__all__ = [
    "RulesEngine",
    "RuleEvaluationResult",
    "ConditionEvaluator",
    "OperatorRegistry",
    "RuleStore",
    "Condition",
    "ConditionGroup",
    "Event",
    "LogicalOperator",
    "Operator",
    "Rule",
    "all_of",
    "any_of",
]
