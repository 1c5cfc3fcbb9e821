"""
Rule document (de)serialization.

A rule document is a JSON (or YAML) array of rule objects. Condition nodes
are told apart by shape: an object with "fact" is a leaf condition, an
object with "conditions" is a nested group. Decoding is all-or-nothing:
the first problem raises RuleParseError and no rules are returned.
"""

import json
from pathlib import Path
from typing import Any, Iterable, Optional

import jsonschema
from jsonschema.exceptions import best_match
import yaml

from ..core.errors import RuleFileError, RuleParseError
from .models import Condition, ConditionGroup, Event, LogicalOperator, Node, Operator, Rule


RULE_SET_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Rule set",
    "type": "array",
    "items": {"$ref": "#/definitions/rule"},
    "definitions": {
        "rule": {
            "type": "object",
            "required": ["id", "conditions", "event"],
            "properties": {
                "id": {"type": "string"},
                "name": {"type": "string"},
                "priority": {"type": "integer"},
                "conditions": {"$ref": "#/definitions/group"},
                "event": {
                    "type": "object",
                    "required": ["type"],
                    "properties": {
                        "type": {"type": "string"},
                        "params": {"type": ["object", "null"]},
                    },
                },
            },
        },
        "group": {
            "type": "object",
            "required": ["operator", "conditions"],
            "properties": {
                "operator": {"enum": [op.value for op in LogicalOperator]},
                "conditions": {
                    "type": "array",
                    "items": {"$ref": "#/definitions/node"},
                },
            },
        },
        "condition": {
            "type": "object",
            "required": ["fact", "operator"],
            "properties": {
                "fact": {"type": "string"},
                "operator": {"type": "string"},
            },
        },
        "node": {
            "anyOf": [
                {"$ref": "#/definitions/condition"},
                {"$ref": "#/definitions/group"},
            ],
        },
    },
}

_NULL_OPERATORS = (Operator.IS_NULL.value, Operator.IS_NOT_NULL.value)

_validator = jsonschema.Draft7Validator(RULE_SET_SCHEMA)


def validate_document(data: Any) -> None:
    """Check a decoded rule document against RULE_SET_SCHEMA."""
    error = best_match(_validator.iter_errors(data))
    if error is None:
        return

    path = _format_path(error.absolute_path)
    rule_id = None
    if error.absolute_path and isinstance(data, list):
        index = error.absolute_path[0]
        if isinstance(index, int) and isinstance(data[index], dict):
            rule_id = data[index].get("id")

    raise RuleParseError(
        f"Rule document failed validation at {path}: {error.message}",
        rule_id=rule_id,
        path=path,
    )


def _format_path(parts: Iterable[Any]) -> str:
    path = "$"
    for part in parts:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


def _require_string(obj: dict, key: str, path: str, rule_id: Optional[str]) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise RuleParseError(
            f"Expected string '{key}' at {path}",
            rule_id=rule_id,
            path=f"{path}.{key}",
        )
    return value


def parse_node(obj: Any, path: str = "$", rule_id: Optional[str] = None) -> Node:
    """Decode one condition-tree node."""
    if not isinstance(obj, dict):
        raise RuleParseError(
            f"Condition node at {path} must be an object",
            rule_id=rule_id,
            path=path,
        )

    if "fact" in obj:
        fact = _require_string(obj, "fact", path, rule_id)
        operator = _require_string(obj, "operator", path, rule_id)
        if "value" not in obj and operator not in _NULL_OPERATORS:
            raise RuleParseError(
                f"Condition at {path} is missing 'value'",
                rule_id=rule_id,
                path=path,
            )
        return Condition(fact=fact, operator=operator, value=obj.get("value"))

    if "conditions" in obj:
        return parse_group(obj, path, rule_id)

    raise RuleParseError(
        f"Condition node at {path} is neither a condition nor a condition group",
        rule_id=rule_id,
        path=path,
    )


def parse_group(obj: Any, path: str = "$", rule_id: Optional[str] = None) -> ConditionGroup:
    """Decode a condition group and all of its children."""
    if not isinstance(obj, dict):
        raise RuleParseError(
            f"Condition group at {path} must be an object",
            rule_id=rule_id,
            path=path,
        )

    operator = obj.get("operator")
    if operator not in (LogicalOperator.AND.value, LogicalOperator.OR.value):
        raise RuleParseError(
            f"Condition group at {path} has invalid operator {operator!r}",
            rule_id=rule_id,
            path=f"{path}.operator",
        )

    children = obj.get("conditions")
    if not isinstance(children, list):
        raise RuleParseError(
            f"Condition group at {path} needs a 'conditions' array",
            rule_id=rule_id,
            path=f"{path}.conditions",
        )

    return ConditionGroup(
        operator=operator,
        conditions=tuple(
            parse_node(child, f"{path}.conditions[{i}]", rule_id)
            for i, child in enumerate(children)
        ),
    )


def parse_rule(obj: Any, path: str = "$") -> Rule:
    """Decode a single rule object."""
    if not isinstance(obj, dict):
        raise RuleParseError(f"Rule at {path} must be an object", path=path)

    rule_id = _require_string(obj, "id", path, None)

    name = obj.get("name", rule_id)
    if not isinstance(name, str):
        raise RuleParseError(f"Rule name at {path} must be a string", rule_id=rule_id, path=f"{path}.name")

    priority = obj.get("priority", 0)
    if isinstance(priority, float) and priority.is_integer():
        priority = int(priority)
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise RuleParseError(
            f"Rule priority at {path} must be an integer",
            rule_id=rule_id,
            path=f"{path}.priority",
        )

    if "conditions" not in obj:
        raise RuleParseError(f"Rule at {path} has no 'conditions'", rule_id=rule_id, path=path)
    conditions = parse_group(obj["conditions"], f"{path}.conditions", rule_id)

    event_obj = obj.get("event")
    if not isinstance(event_obj, dict):
        raise RuleParseError(f"Rule at {path} needs an 'event' object", rule_id=rule_id, path=f"{path}.event")
    event_type = _require_string(event_obj, "type", f"{path}.event", rule_id)
    params = event_obj.get("params")
    if params is not None and not isinstance(params, dict):
        raise RuleParseError(
            f"Event params at {path} must be an object",
            rule_id=rule_id,
            path=f"{path}.event.params",
        )

    return Rule(
        id=rule_id,
        name=name,
        priority=priority,
        conditions=conditions,
        event=Event(type=event_type, params=params),
    )


def parse_rules(data: Any, validate: bool = True) -> list[Rule]:
    """Decode a whole rule document; raises on the first problem."""
    if validate:
        validate_document(data)

    if not isinstance(data, list):
        raise RuleParseError("Rule document must be an array of rules", path="$")

    return [parse_rule(obj, f"$[{i}]") for i, obj in enumerate(data)]


def loads(text: str, validate: bool = True) -> list[Rule]:
    """Parse rules from a JSON string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RuleParseError(f"Invalid JSON: {e}", path="$")
    return parse_rules(data, validate=validate)


def node_to_dict(node: Node) -> dict[str, Any]:
    if isinstance(node, ConditionGroup):
        return {
            "operator": node.operator,
            "conditions": [node_to_dict(child) for child in node.conditions],
        }
    return {"fact": node.fact, "operator": node.operator, "value": node.value}


def rule_to_dict(rule: Rule) -> dict[str, Any]:
    event: dict[str, Any] = {"type": rule.event.type}
    if rule.event.params:
        event["params"] = rule.event.params

    return {
        "id": rule.id,
        "name": rule.name,
        "priority": rule.priority,
        "conditions": node_to_dict(rule.conditions),
        "event": event,
    }


def dumps(rules: Iterable[Rule], indent: Optional[int] = 2) -> str:
    """Serialize rules to a JSON string."""
    try:
        return json.dumps([rule_to_dict(r) for r in rules], indent=indent)
    except (TypeError, ValueError) as e:
        raise RuleParseError(f"Rule set is not JSON serializable: {e}")


def _is_yaml(path: Path) -> bool:
    return path.suffix in (".yaml", ".yml")


def load_file(path: str, validate: bool = True) -> list[Rule]:
    """Load rules from a JSON or YAML file."""
    path = Path(path)
    if path.suffix not in (".json", ".yaml", ".yml"):
        raise RuleFileError(f"Unsupported rule file format: {path.suffix}", path=str(path))

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise RuleFileError(f"Rule file not found: {path}", path=str(path))
    except OSError as e:
        raise RuleFileError(f"Cannot read rule file {path}: {e}", path=str(path))

    if not _is_yaml(path):
        return loads(content, validate=validate)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RuleParseError(f"Invalid YAML: {e}", path="$")
    return parse_rules(data if data is not None else [], validate=validate)


def save_file(path: str, rules: Iterable[Rule]) -> None:
    """Write rules as indented JSON, or YAML for .yaml/.yml paths."""
    path = Path(path)
    if path.suffix not in (".json", ".yaml", ".yml"):
        raise RuleFileError(f"Unsupported rule file format: {path.suffix}", path=str(path))

    content = dumps(rules)
    if _is_yaml(path):
        # Go through JSON so tuples and other JSON-compatible values dump as plain YAML
        content = yaml.safe_dump(json.loads(content), sort_keys=False, allow_unicode=True)

    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise RuleFileError(f"Cannot write rule file {path}: {e}", path=str(path))
