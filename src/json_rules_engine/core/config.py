"""Configuration loading and validation."""

import os
import json
import hashlib
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError


class HotReloadConfig(BaseModel):
    """Rule file watcher settings."""
    enabled: bool = Field(default=False)
    check_interval_seconds: float = Field(default=5.0, ge=0.05)
    debounce_seconds: float = Field(default=0.5, ge=0)  # Wait for writes to settle


class EngineConfig(BaseModel):
    """Main engine configuration."""
    name: str = Field(default="json-rules-engine")

    # Reject custom registrations that reuse a built-in operator identifier.
    # Off by default: a custom "equal" shadows the built-in one.
    reserve_builtin_operators: bool = Field(default=False)

    validate_schema: bool = Field(default=True)
    rules_path: Optional[str] = Field(default=None)
    hot_reload: HotReloadConfig = Field(default_factory=HotReloadConfig)

    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level

    def config_hash(self) -> str:
        """Generate hash of config for change detection."""
        return hashlib.sha256(
            self.model_dump_json().encode()
        ).hexdigest()[:16]

    @classmethod
    def from_env(cls, base: Optional["EngineConfig"] = None) -> "EngineConfig":
        """Overlay RULES_ENGINE_* environment variables on a config."""
        data = (base or cls()).model_dump()

        rules_path = os.getenv("RULES_ENGINE_RULES_PATH")
        if rules_path:
            data["rules_path"] = rules_path

        reserve = os.getenv("RULES_ENGINE_RESERVE_BUILTINS")
        if reserve is not None:
            data["reserve_builtin_operators"] = reserve.lower() in ("1", "true", "yes")

        log_level = os.getenv("RULES_ENGINE_LOG_LEVEL")
        if log_level:
            data["log_level"] = log_level

        if os.getenv("LOG_FORMAT") == "json":
            data["log_format"] = "json"

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid environment configuration: {e}")


class ConfigLoader:
    """Loads engine configuration from YAML/JSON files."""

    def __init__(self, config_dir: str = "./config"):
        self.config_dir = Path(config_dir)
        self._hashes: dict[str, str] = {}

    def load(self, path: Optional[str] = None) -> EngineConfig:
        """Load engine configuration."""
        if path is None:
            path = self.config_dir / "engine.yaml"
        else:
            path = Path(path)

        data = self._load_file(path)
        try:
            return EngineConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid engine config: {e}", config_path=str(path))

    def has_config_changed(self, path: str) -> bool:
        """Check if a config file has changed since last load."""
        path = Path(path)
        if not path.exists():
            return str(path) in self._hashes
        current_hash = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return current_hash != self._hashes.get(str(path))

    def _load_file(self, path: Path) -> dict[str, Any]:
        """Load YAML or JSON file."""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", config_path=str(path))

        try:
            content = path.read_text()
            self._hashes[str(path)] = hashlib.sha256(content.encode()).hexdigest()[:16]

            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif path.suffix == ".json":
                data = json.loads(content)
            else:
                raise ConfigError(
                    f"Unsupported config format: {path.suffix}",
                    config_path=str(path)
                )
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", config_path=str(path))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON: {e}", config_path=str(path))

        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping", config_path=str(path))
        return data
