"""Custom operator registry."""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from ..core.errors import DuplicateOperatorError
from .operators import Predicate, is_builtin


logger = structlog.get_logger()


class ReadWriteLock:
    """
    Many concurrent readers or a single writer.

    Writers wait for active readers to drain; new readers wait while a
    writer is waiting so registrations cannot starve.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class OperatorRegistry:
    """
    Registry for caller-supplied operator predicates.

    A predicate receives (fact_value, condition_value) and returns a bool.
    The evaluator consults this registry before the built-in table, so with
    reserve_builtins=False a custom "equal" replaces the built-in one.
    """

    def __init__(self, reserve_builtins: bool = False):
        self.reserve_builtins = reserve_builtins
        self._operators: dict[str, Predicate] = {}
        self._lock = ReadWriteLock()

    def register(self, name: str, predicate: Predicate) -> None:
        """Register a custom operator."""
        if not callable(predicate):
            raise TypeError(f"Operator {name!r} predicate must be callable")

        if self.reserve_builtins and is_builtin(name):
            raise DuplicateOperatorError(
                f"Operator {name} is a reserved built-in operator",
                operator=name,
            )

        with self._lock.write():
            if name in self._operators:
                raise DuplicateOperatorError(
                    f"Operator {name} is already registered",
                    operator=name,
                )
            self._operators[name] = predicate

        logger.debug("operator_registered", operator=name, shadows_builtin=is_builtin(name))

    def unregister(self, name: str) -> None:
        """Remove a custom operator; no-op if absent."""
        with self._lock.write():
            removed = self._operators.pop(name, None)
        if removed is not None:
            logger.debug("operator_unregistered", operator=name)

    def lookup(self, name: str) -> Optional[Predicate]:
        """Get the predicate registered under name."""
        with self._lock.read():
            return self._operators.get(name)

    def names(self) -> list[str]:
        """List all registered custom operators."""
        with self._lock.read():
            return list(self._operators.keys())

    def __contains__(self, name: object) -> bool:
        with self._lock.read():
            return name in self._operators

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._operators)
