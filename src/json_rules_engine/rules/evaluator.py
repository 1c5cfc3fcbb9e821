"""Condition evaluation for rules engine."""

from typing import Any, Mapping, Optional

import structlog

from .models import Condition, ConditionGroup, LogicalOperator, Node
from .operators import get_builtin
from .registry import OperatorRegistry


logger = structlog.get_logger()


class ConditionEvaluator:
    """
    Evaluates condition trees against a fact mapping.

    Groups:
    - and: false on the first failing child
    - or: true on the first passing child
    - an empty group is true; an unknown logical operator is false

    Leaves:
    - a missing fact fails the leaf
    - custom operators are looked up before built-ins
    - an unknown operator, or an operator that raises, fails the leaf

    Children are always visited left to right and short-circuited children
    are never evaluated, so side-effecting custom operators run in a
    reproducible order.
    """

    def __init__(self, registry: Optional[OperatorRegistry] = None):
        self.registry = registry if registry is not None else OperatorRegistry()

    def evaluate(self, node: Node, facts: Mapping[str, Any]) -> bool:
        """Evaluate a condition or a condition group."""
        if isinstance(node, ConditionGroup):
            return self._evaluate_group(node, facts)
        if isinstance(node, Condition):
            return self._evaluate_condition(node, facts)
        raise TypeError(f"Not a condition node: {node!r}")

    def _evaluate_group(self, group: ConditionGroup, facts: Mapping[str, Any]) -> bool:
        if not group.conditions:
            return True

        if group.operator == LogicalOperator.AND:
            for child in group.conditions:
                if not self.evaluate(child, facts):
                    return False
            return True

        if group.operator == LogicalOperator.OR:
            for child in group.conditions:
                if self.evaluate(child, facts):
                    return True
            return False

        logger.debug("unknown_logical_operator", operator=group.operator)
        return False

    def _evaluate_condition(self, condition: Condition, facts: Mapping[str, Any]) -> bool:
        if condition.fact not in facts:
            return False
        value = facts[condition.fact]

        custom = self.registry.lookup(condition.operator)
        if custom is not None:
            try:
                return bool(custom(value, condition.value))
            except Exception:
                logger.warning(
                    "custom_operator_failed",
                    operator=condition.operator,
                    fact=condition.fact,
                    exc_info=True,
                )
                return False

        builtin = get_builtin(condition.operator)
        if builtin is None:
            logger.debug("unknown_operator", operator=condition.operator, fact=condition.fact)
            return False

        try:
            return builtin(value, condition.value)
        except Exception:
            logger.warning(
                "builtin_operator_failed",
                operator=condition.operator,
                fact=condition.fact,
                exc_info=True,
            )
            return False
