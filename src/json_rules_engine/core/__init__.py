"""Core engine components."""

from .config import ConfigLoader, EngineConfig, HotReloadConfig
from .logging_config import configure_library_defaults, configure_logging
from .errors import (
    EngineError,
    RuleParseError,
    DuplicateOperatorError,
    RuleFileError,
    ConfigError,
)

__all__ = [
    "ConfigLoader",
    "EngineConfig",
    "HotReloadConfig",
    "configure_logging",
    "configure_library_defaults",
    "EngineError",
    "RuleParseError",
    "DuplicateOperatorError",
    "RuleFileError",
    "ConfigError",
]
