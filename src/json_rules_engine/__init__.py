"""
JSON Rules Engine

An embeddable rule-evaluation engine:
- Rules defined in JSON/YAML or built in code
- Nested and/or condition groups
- Built-in comparison, membership, pattern and null operators
- Pluggable custom operators
"""

__version__ = "0.1.0"

from .core.config import EngineConfig
from .core.errors import DuplicateOperatorError, EngineError, RuleFileError, RuleParseError
from .core.logging_config import configure_library_defaults
from .rules import (
    Condition,
    ConditionGroup,
    Event,
    LogicalOperator,
    Operator,
    Rule,
    RulesEngine,
    all_of,
    any_of,
)

__all__ = [
    "EngineConfig",
    "EngineError",
    "RuleParseError",
    "RuleFileError",
    "DuplicateOperatorError",
    "Condition",
    "ConditionGroup",
    "Event",
    "LogicalOperator",
    "Operator",
    "Rule",
    "RulesEngine",
    "all_of",
    "any_of",
]

configure_library_defaults()
