#!/usr/bin/env python3
"""
Demo script walking through the rules engine.
Run with: python3 demo.py
"""

import math
import sys
import os
import tempfile

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from json_rules_engine import (
    Condition,
    Event,
    Rule,
    RulesEngine,
    RuleParseError,
    all_of,
    any_of,
)
from json_rules_engine.rules.comparator import is_numeric, to_float


CUSTOMER_RULES = """[
    {
        "id": "vip-customer",
        "name": "VIP Customer Rule",
        "priority": 20,
        "conditions": {
            "operator": "and",
            "conditions": [
                {"fact": "membershipLevel", "operator": "equal", "value": "platinum"},
                {"fact": "yearsAsMember", "operator": "greaterThan", "value": 5}
            ]
        },
        "event": {
            "type": "vip-status",
            "params": {"benefits": ["priority support", "exclusive offers"]}
        }
    },
    {
        "id": "new-customer",
        "name": "New Customer Welcome",
        "priority": 5,
        "conditions": {
            "operator": "and",
            "conditions": [
                {"fact": "yearsAsMember", "operator": "lessThan", "value": 1},
                {"fact": "firstPurchase", "operator": "equal", "value": true}
            ]
        },
        "event": {"type": "welcome-offer", "params": {"offer": "10% off your next purchase"}}
    }
]"""


def divisible_by(a, b):
    if not is_numeric(a) or not is_numeric(b) or to_float(b) == 0:
        return False
    return math.fmod(to_float(a), to_float(b)) == 0


def starts_with(a, b):
    return isinstance(a, str) and isinstance(b, str) and a.startswith(b)


def show(facts, events):
    print(f"    facts:  {facts}")
    if events:
        for event in events:
            print(f"    ✓ {event.type} {event.params or ''}")
    else:
        print("    - no rules matched")


def demo():
    print("=" * 60)
    print("JSON RULES ENGINE - DEMO")
    print("=" * 60)
    print()

    # 1. Programmatic rules
    print("[1] Programmatic rules")
    print("-" * 40)

    engine = RulesEngine()
    engine.add_rule(Rule(
        id="adult",
        priority=10,
        conditions=all_of(Condition("age", "greaterThan", 18)),
        event=Event("adult"),
    ))
    engine.add_rule(Rule(
        id="adult-or-us",
        priority=1,
        conditions=any_of(
            Condition("age", "greaterThan", 18),
            Condition("country", "equal", "US"),
        ),
        event=Event("eligible", {"reason": "adult or US resident"}),
    ))

    for facts in ({"age": 20}, {"age": 15, "country": "US"}, {"age": 15}):
        show(facts, engine.evaluate(facts))
    print()

    # 2. Custom operators
    print("[2] Custom operators")
    print("-" * 40)

    engine = RulesEngine()
    engine.register_operator("divisibleBy", divisible_by)
    engine.register_operator("startsWith", starts_with)
    engine.add_rule(Rule(
        id="age-rule",
        priority=1,
        conditions=all_of(
            Condition("age", "divisibleBy", 5),
            Condition("age", "greaterThan", 18),
        ),
        event=Event("ageRuleMatched", {"message": "Age requirements met!"}),
    ))
    engine.add_rule(Rule(
        id="name-rule",
        priority=2,
        conditions=all_of(Condition("name", "startsWith", "John")),
        event=Event("nameRuleMatched", {"message": "Name starts with John!"}),
    ))

    for facts in ({"age": 25, "name": "John Doe"}, {"age": 16, "name": "John Smith"}, {"age": 30, "name": "Jane"}):
        show(facts, engine.evaluate(facts))
    print()

    # 3. JSON rules, save and reload
    print("[3] JSON rule documents")
    print("-" * 40)

    engine = RulesEngine()
    engine.load_rules_from_json(CUSTOMER_RULES)
    print(f"  ✓ Loaded {len(engine.list_rules())} rules")

    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "rules.json")
        engine.save_rules_to_file(path)
        reloaded = RulesEngine()
        reloaded.load_rules_from_file(path)
        print(f"  ✓ Saved and reloaded {len(reloaded.list_rules())} rules")

    show({"membershipLevel": "platinum", "yearsAsMember": 6}, reloaded.evaluate(
        {"membershipLevel": "platinum", "yearsAsMember": 6}
    ))
    show({"yearsAsMember": 0, "firstPurchase": True}, reloaded.evaluate(
        {"yearsAsMember": 0, "firstPurchase": True}
    ))
    print()

    # 4. Structural errors
    print("[4] Structural errors")
    print("-" * 40)

    try:
        reloaded.load_rules_from_json('[{"id": "bad", "conditions": {"operator": "and", "conditions": [{"x": 1}]}, "event": {"type": "x"}}]')
    except RuleParseError as e:
        print(f"  ✓ Rejected: {e.message}")
    print(f"  ✓ Previous rules kept: {[r.id for r in reloaded.list_rules()]}")
    print()


if __name__ == "__main__":
    demo()
