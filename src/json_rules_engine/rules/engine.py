"""Rules engine - evaluates rule conditions against facts and collects events."""

import time
from typing import Any, Iterable, Mapping, Optional
from dataclasses import dataclass
import structlog

from ..core.config import EngineConfig
from ..core.errors import EngineError
from . import serialization
from .evaluator import ConditionEvaluator
from .models import Event, Rule
from .operators import Predicate
from .registry import OperatorRegistry
from .store import RuleStore


logger = structlog.get_logger()


@dataclass
class RuleEvaluationResult:
    """Outcome of evaluating one rule."""
    rule_id: str
    rule_name: str
    priority: int
    matched: bool
    event: Optional[Event] = None
    duration_ms: float = 0


class RulesEngine:
    """
    Rules engine that evaluates JSON-defined or programmatic rules.

    Flow:
    1. Take a snapshot of the rules in priority order
    2. Evaluate each rule's condition tree against the facts
    3. Collect the event of every matching rule

    Every rule is evaluated on every pass; a match never stops the pass.
    Loading a rule set replaces the old one only after the whole document
    has parsed, so a bad document leaves the current rules in place.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        registry: Optional[OperatorRegistry] = None,
    ):
        self.config = config or EngineConfig()

        # Components
        self.registry = registry or OperatorRegistry(
            reserve_builtins=self.config.reserve_builtin_operators,
        )
        self.evaluator = ConditionEvaluator(self.registry)
        self.store = RuleStore()

    # ==================== Rules ====================

    def add_rule(self, rule: Rule) -> None:
        """Add a rule; priority order is restored immediately."""
        self.store.add(rule)
        logger.debug("rule_added", rule_id=rule.id, priority=rule.priority)

    def add_rules(self, rules: Iterable[Rule]) -> None:
        rules = list(rules)
        self.store.extend(rules)
        logger.debug("rules_added", count=len(rules))

    def load_rules(self, rules: Iterable[Rule]) -> None:
        """Replace the whole rule set."""
        self.store.replace_all(rules)
        logger.info("rules_loaded", total=len(self.store))

    def load_rules_from_json(self, text: str) -> None:
        """Parse a JSON rule document and replace the rule set with it."""
        try:
            rules = serialization.loads(text, validate=self.config.validate_schema)
        except EngineError as e:
            logger.error("rules_load_failed", error=e.message, **e.context)
            raise
        self.load_rules(rules)

    def load_rules_from_file(self, path: str) -> None:
        """Load a JSON or YAML rule file and replace the rule set with it."""
        try:
            rules = serialization.load_file(path, validate=self.config.validate_schema)
        except EngineError as e:
            logger.error("rules_load_failed", source=str(path), error=e.message)
            raise
        self.load_rules(rules)
        logger.info("rules_file_loaded", source=str(path), total=len(rules))

    def save_rules_to_file(self, path: str) -> None:
        serialization.save_file(path, self.store.snapshot())
        logger.info("rules_saved", destination=str(path), total=len(self.store))

    def to_json(self, indent: Optional[int] = 2) -> str:
        return serialization.dumps(self.store.snapshot(), indent=indent)

    def remove_rule(self, rule_id: str) -> bool:
        return self.store.remove(rule_id)

    def replace_rule(self, rule: Rule) -> bool:
        return self.store.replace(rule)

    def clear(self) -> None:
        self.store.clear()

    # ==================== Operators ====================

    def register_operator(self, name: str, predicate: Predicate) -> None:
        """Register a custom operator."""
        self.registry.register(name, predicate)

    def unregister_operator(self, name: str) -> None:
        self.registry.unregister(name)

    # ==================== Evaluation ====================

    def evaluate(self, facts: Mapping[str, Any]) -> list[Event]:
        """
        Evaluate every rule against the facts.

        Args:
            facts: Fact name to value; not modified

        Returns:
            Events of the matching rules, highest priority first
        """
        events = []
        for rule in self.store.snapshot():
            if self.evaluator.evaluate(rule.conditions, facts):
                events.append(rule.event)
        return events

    def run(self, facts: Mapping[str, Any]) -> list[RuleEvaluationResult]:
        """Evaluate every rule and report the outcome of each one."""
        results = []
        for rule in self.store.snapshot():
            start_time = time.monotonic()
            matched = self.evaluator.evaluate(rule.conditions, facts)
            results.append(RuleEvaluationResult(
                rule_id=rule.id,
                rule_name=rule.name,
                priority=rule.priority,
                matched=matched,
                event=rule.event if matched else None,
                duration_ms=(time.monotonic() - start_time) * 1000,
            ))

        logger.debug(
            "rules_evaluated",
            total=len(results),
            matched=sum(1 for r in results if r.matched),
        )
        return results

    # ==================== Utility Methods ====================

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        """Get a rule by ID."""
        return self.store.get(rule_id)

    def list_rules(self) -> list[Rule]:
        """Rules in evaluation order."""
        return list(self.store.snapshot())
