"""Priority-ordered rule storage."""

import threading
from typing import Iterable, Iterator, Optional

from .models import Rule


class RuleStore:
    """
    Holds rules sorted by descending priority.

    Ties keep insertion order. Every mutation re-sorts immediately and
    publishes a new tuple, so snapshot() is always a consistent, sorted view
    that later mutations cannot change.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._lock = threading.Lock()
        self._rules: tuple[Rule, ...] = self._sorted(rules)

    @staticmethod
    def _sorted(rules: Iterable[Rule]) -> tuple[Rule, ...]:
        # list.sort is stable, which keeps equal priorities in insertion order
        ordered = list(rules)
        ordered.sort(key=lambda r: r.priority, reverse=True)
        return tuple(ordered)

    def add(self, rule: Rule) -> None:
        """Add a rule and re-establish priority order."""
        with self._lock:
            self._rules = self._sorted(self._rules + (rule,))

    def extend(self, rules: Iterable[Rule]) -> None:
        with self._lock:
            self._rules = self._sorted(self._rules + tuple(rules))

    def replace_all(self, rules: Iterable[Rule]) -> None:
        """Swap in a whole new rule set."""
        new_rules = self._sorted(rules)
        with self._lock:
            self._rules = new_rules

    def replace(self, rule: Rule) -> bool:
        """Replace the stored rule with the same id. Returns False if none matched."""
        with self._lock:
            for index, existing in enumerate(self._rules):
                if existing.id == rule.id:
                    rules = list(self._rules)
                    rules[index] = rule
                    self._rules = self._sorted(rules)
                    return True
        return False

    def remove(self, rule_id: str) -> bool:
        """Remove every rule with the given id."""
        with self._lock:
            remaining = tuple(r for r in self._rules if r.id != rule_id)
            removed = len(remaining) != len(self._rules)
            self._rules = remaining
        return removed

    def clear(self) -> None:
        with self._lock:
            self._rules = ()

    def get(self, rule_id: str) -> Optional[Rule]:
        """Get a rule by ID."""
        return next((r for r in self._rules if r.id == rule_id), None)

    def snapshot(self) -> tuple[Rule, ...]:
        return self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)
