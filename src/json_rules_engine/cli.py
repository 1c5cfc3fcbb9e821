"""
Command-line front end.

  json-rules evaluate --rules rules.json --facts facts.json
  json-rules evaluate --rules rules.yaml --facts-json '{"age": 20}' --trace
  json-rules validate --rules rules.json
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from .core.config import ConfigLoader, EngineConfig
from .core.errors import ConfigError, EngineError
from .core.logging_config import configure_logging
from .rules.engine import RulesEngine

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INVALID = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="json-rules",
        description="Evaluate JSON rule sets against facts",
    )
    parser.add_argument("--config", help="Engine config file (YAML or JSON)")
    parser.add_argument("--log-level", help="Override the configured log level")
    parser.add_argument("--log-format", choices=["console", "json"], help="Log output format")

    commands = parser.add_subparsers(dest="command", required=True)

    evaluate = commands.add_parser("evaluate", help="Print the events triggered by a set of facts")
    evaluate.add_argument("--rules", help="Rule file (defaults to the configured rules_path)")
    facts = evaluate.add_mutually_exclusive_group(required=True)
    facts.add_argument("--facts", help="JSON file holding the fact object")
    facts.add_argument("--facts-json", help="Fact object as an inline JSON string")
    evaluate.add_argument("--trace", action="store_true", help="Report every rule, not only matches")

    validate = commands.add_parser("validate", help="Check that a rule file parses")
    validate.add_argument("--rules", help="Rule file (defaults to the configured rules_path)")

    return parser


def _load_config(args: argparse.Namespace) -> EngineConfig:
    config = ConfigLoader().load(args.config) if args.config else EngineConfig()
    config = EngineConfig.from_env(config)

    overrides: dict[str, Any] = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format
    if getattr(args, "rules", None):
        overrides["rules_path"] = args.rules
    if overrides:
        try:
            config = EngineConfig(**{**config.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigError(f"Invalid command-line option: {e}")
    return config


def _read_facts(args: argparse.Namespace) -> dict[str, Any]:
    text = args.facts_json if args.facts_json is not None else Path(args.facts).read_text()
    facts = json.loads(text)
    if not isinstance(facts, dict):
        raise ValueError("facts must be a JSON object")
    return facts


def _cmd_evaluate(engine: RulesEngine, args: argparse.Namespace) -> int:
    try:
        facts = _read_facts(args)
    except (OSError, ValueError) as e:
        print(f"error: cannot read facts: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.trace:
        output = [asdict(result) for result in engine.run(facts)]
    else:
        output = [asdict(event) for event in engine.evaluate(facts)]

    print(json.dumps(output, indent=2, default=str))
    return EXIT_OK


def _cmd_validate(engine: RulesEngine, args: argparse.Namespace) -> int:
    print(json.dumps({"valid": True, "rules": len(engine.store)}))
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = _load_config(args)
    except EngineError as e:
        print(json.dumps({"valid": False, "error": e.to_dict()}, indent=2), file=sys.stderr)
        return EXIT_USAGE

    configure_logging(config.log_level, config.log_format)

    if not config.rules_path:
        print("error: no rule file given (--rules or RULES_ENGINE_RULES_PATH)", file=sys.stderr)
        return EXIT_USAGE

    engine = RulesEngine(config)
    try:
        engine.load_rules_from_file(config.rules_path)
    except EngineError as e:
        print(json.dumps({"valid": False, "error": e.to_dict()}, indent=2))
        return EXIT_INVALID

    if args.command == "evaluate":
        return _cmd_evaluate(engine, args)
    return _cmd_validate(engine, args)
