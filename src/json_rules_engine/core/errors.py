"""Engine error definitions."""

import hashlib
from typing import Optional, Any
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for classification."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for routing and handling."""
    STRUCTURAL = "structural"     # Malformed rule document - won't resolve on retry
    CONFLICT = "conflict"         # Registration clash
    STORAGE = "storage"           # File read/write failure
    CONFIGURATION = "configuration"


class EngineError(Exception):
    """Base exception for all rules engine errors."""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.STRUCTURAL,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.category = category
        self.context = context or {}

    def fingerprint(self) -> str:
        """Generate error fingerprint for deduplication."""
        components = [
            self.__class__.__name__,
            self.category.value,
            str(self.context.get("rule_id", "")),
            str(self.context.get("path", "")),
            str(self.context.get("operator", "")),
        ]
        return hashlib.sha256(":".join(components).encode()).hexdigest()[:16]

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for logging/CLI output."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context,
            "fingerprint": self.fingerprint(),
        }


class RuleParseError(EngineError):
    """Rule document is malformed or a condition node has no recognised shape."""

    def __init__(
        self,
        message: str,
        rule_id: Optional[str] = None,
        path: Optional[str] = None,
        **kwargs
    ):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("category", ErrorCategory.STRUCTURAL)
        super().__init__(message, **kwargs)
        self.context["rule_id"] = rule_id
        self.context["path"] = path


class DuplicateOperatorError(EngineError):
    """An operator identifier is already registered."""

    def __init__(self, message: str, operator: Optional[str] = None, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.MEDIUM)
        kwargs.setdefault("category", ErrorCategory.CONFLICT)
        super().__init__(message, **kwargs)
        self.context["operator"] = operator


class RuleFileError(EngineError):
    """Rule file could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("category", ErrorCategory.STORAGE)
        super().__init__(message, **kwargs)
        self.context["path"] = path


class ConfigError(EngineError):
    """Configuration loading or validation error."""

    def __init__(self, message: str, config_path: Optional[str] = None, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("category", ErrorCategory.CONFIGURATION)
        super().__init__(message, **kwargs)
        self.context["config_path"] = config_path
