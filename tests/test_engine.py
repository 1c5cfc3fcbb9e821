"""Tests for the rules engine."""

import json
import os
import sys
import threading

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from json_rules_engine.core.config import EngineConfig
from json_rules_engine.core.errors import DuplicateOperatorError, RuleFileError, RuleParseError
from json_rules_engine.rules.engine import RulesEngine
from json_rules_engine.rules.models import Condition, ConditionGroup, Event, Rule, all_of, any_of


CUSTOMER_RULES = [
    {
        "id": "vip-customer",
        "name": "VIP Customer Rule",
        "priority": 20,
        "conditions": {
            "operator": "and",
            "conditions": [
                {"fact": "membershipLevel", "operator": "equal", "value": "platinum"},
                {"fact": "yearsAsMember", "operator": "greaterThan", "value": 5},
            ],
        },
        "event": {
            "type": "vip-status",
            "params": {"benefits": ["priority support", "exclusive offers"]},
        },
    },
    {
        "id": "new-customer",
        "name": "New Customer Welcome",
        "priority": 5,
        "conditions": {
            "operator": "and",
            "conditions": [
                {"fact": "yearsAsMember", "operator": "lessThan", "value": 1},
                {"fact": "firstPurchase", "operator": "equal", "value": True},
            ],
        },
        "event": {"type": "welcome-offer", "params": {"offer": "10% off"}},
    },
    {
        "id": "any-member",
        "name": "Any member",
        "priority": 1,
        "conditions": {
            "operator": "or",
            "conditions": [
                {"fact": "yearsAsMember", "operator": "greaterThanInclusive", "value": 0},
                {
                    "operator": "and",
                    "conditions": [
                        {"fact": "email", "operator": "regex", "value": "@example\\.com$"},
                        {"fact": "email", "operator": "isNotNull"},
                    ],
                },
            ],
        },
        "event": {"type": "member"},
    },
]


def make_rule(rule_id, priority, fact="age", operator="greaterThan", value=18):
    return Rule(
        id=rule_id,
        name=rule_id,
        priority=priority,
        conditions=all_of(Condition(fact, operator, value)),
        event=Event(type=rule_id),
    )


class TestEvaluate:
    """Test end-to-end evaluation."""

    @pytest.fixture
    def engine(self):
        return RulesEngine()

    def test_single_rule_match(self, engine):
        """Scenario: age greaterThan 18 fires for age 20."""
        engine.add_rule(make_rule("adult", 1))

        assert engine.evaluate({"age": 20}) == [Event(type="adult")]
        assert engine.evaluate({"age": 15}) == []

    def test_or_second_branch(self, engine):
        """Scenario: OR matches through the second branch."""
        engine.add_rule(Rule(
            id="adult-or-us",
            priority=1,
            conditions=any_of(
                Condition("age", "greaterThan", 18),
                Condition("country", "equal", "US"),
            ),
            event=Event(type="eligible"),
        ))

        assert engine.evaluate({"age": 15, "country": "US"}) == [Event(type="eligible")]

    def test_custom_operator(self, engine):
        """Scenario: custom isEven operator."""
        engine.register_operator("isEven", lambda a, _: isinstance(a, int) and a % 2 == 0)
        engine.add_rule(make_rule("even", 1, fact="number", operator="isEven", value=None))

        assert [e.type for e in engine.evaluate({"number": 4})] == ["even"]
        assert engine.evaluate({"number": 3}) == []

    def test_duplicate_operator(self, engine):
        engine.register_operator("isEven", lambda a, b: True)
        with pytest.raises(DuplicateOperatorError):
            engine.register_operator("isEven", lambda a, b: False)

        engine.unregister_operator("isEven")
        engine.register_operator("isEven", lambda a, b: False)

    def test_reserved_builtins_from_config(self):
        engine = RulesEngine(EngineConfig(reserve_builtin_operators=True))
        with pytest.raises(DuplicateOperatorError):
            engine.register_operator("equal", lambda a, b: True)

    def test_in_and_not_in(self, engine):
        """Scenario: in / notIn against a fruit list."""
        fruits = ["banana", "apple", "orange"]
        engine.add_rule(make_rule("in", 2, fact="fruit", operator="in", value=fruits))
        engine.add_rule(make_rule("not-in", 1, fact="fruit", operator="notIn", value=fruits))

        assert [e.type for e in engine.evaluate({"fruit": "apple"})] == ["in"]
        assert [e.type for e in engine.evaluate({"fruit": "kiwi"})] == ["not-in"]

    def test_all_rules_evaluated(self, engine):
        """Matching one rule never stops later rules from firing."""
        engine.add_rules([make_rule("a", 3), make_rule("b", 2), make_rule("c", 1, value=100)])

        assert [e.type for e in engine.evaluate({"age": 30})] == ["a", "b"]

    def test_empty_conditions_always_match(self, engine):
        engine.add_rule(Rule(id="always", conditions=ConditionGroup("and", ()), event=Event("always")))
        assert engine.evaluate({}) == [Event("always")]

    def test_event_returned_verbatim(self, engine):
        params = {"message": "hi", "nested": {"a": [1, 2]}}
        engine.add_rule(Rule(id="r", conditions=all_of(), event=Event("t", params)))

        (event,) = engine.evaluate({})
        assert event.params is params

    def test_run_reports_every_rule(self, engine):
        engine.add_rules([make_rule("adult", 2), make_rule("senior", 1, value=64)])

        results = engine.run({"age": 30})

        assert [(r.rule_id, r.matched) for r in results] == [("adult", True), ("senior", False)]
        assert results[0].event == Event(type="adult")
        assert results[1].event is None
        assert all(r.duration_ms >= 0 for r in results)

    def test_concurrent_evaluations(self, engine):
        """Independent threads can evaluate the same engine."""
        engine.add_rule(make_rule("adult", 1))
        failures = []

        def worker(age):
            for _ in range(100):
                expected = ["adult"] if age > 18 else []
                if [e.type for e in engine.evaluate({"age": age})] != expected:
                    failures.append(age)

        threads = [threading.Thread(target=worker, args=(age,)) for age in (10, 20, 30, 5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert not failures


class TestPriority:
    """Test priority ordering."""

    def test_descending_priority(self):
        engine = RulesEngine()
        for rule_id, priority in (("five", 5), ("twenty", 20), ("one", 1)):
            engine.add_rule(make_rule(rule_id, priority))

        assert [r.priority for r in engine.list_rules()] == [20, 5, 1]
        assert [e.type for e in engine.evaluate({"age": 30})] == ["twenty", "five", "one"]

    def test_ties_keep_insertion_order(self):
        engine = RulesEngine()
        engine.add_rules([make_rule("first", 1), make_rule("high", 9), make_rule("second", 1)])
        engine.add_rule(make_rule("third", 1))

        assert [r.id for r in engine.list_rules()] == ["high", "first", "second", "third"]

    def test_loaded_rules_sorted(self):
        engine = RulesEngine()
        engine.load_rules_from_json(json.dumps(list(reversed(CUSTOMER_RULES))))

        assert [r.id for r in engine.list_rules()] == ["vip-customer", "new-customer", "any-member"]


class TestRuleManagement:
    """Test loading, replacing and saving rule sets."""

    @pytest.fixture
    def engine(self):
        engine = RulesEngine()
        engine.load_rules_from_json(json.dumps(CUSTOMER_RULES))
        return engine

    def test_json_rules(self, engine):
        events = engine.evaluate({
            "membershipLevel": "platinum",
            "yearsAsMember": 6,
            "firstPurchase": False,
        })

        assert [e.type for e in events] == ["vip-status", "member"]
        assert events[0].params["benefits"] == ["priority support", "exclusive offers"]

    def test_failed_load_keeps_previous_rules(self, engine):
        """A bad document replaces nothing."""
        before = engine.list_rules()
        broken = CUSTOMER_RULES + [{"id": "bad", "conditions": {"operator": "and", "conditions": [{"nope": 1}]}, "event": {"type": "x"}}]

        with pytest.raises(RuleParseError):
            engine.load_rules_from_json(json.dumps(broken))
        with pytest.raises(RuleParseError):
            engine.load_rules_from_json("[{not json")

        assert engine.list_rules() == before

    def test_load_replaces_rules(self, engine):
        engine.load_rules_from_json(json.dumps(CUSTOMER_RULES[:1]))
        assert [r.id for r in engine.list_rules()] == ["vip-customer"]

    def test_round_trip_preserves_behaviour(self, engine, tmp_path):
        facts_list = [
            {"membershipLevel": "platinum", "yearsAsMember": 6, "firstPurchase": False},
            {"yearsAsMember": 0, "firstPurchase": True},
            {"email": "ann@example.com"},
            {},
        ]
        path = tmp_path / "rules.json"
        engine.save_rules_to_file(str(path))

        reloaded = RulesEngine()
        reloaded.load_rules_from_file(str(path))

        for facts in facts_list:
            assert reloaded.evaluate(facts) == engine.evaluate(facts)

        again = RulesEngine()
        again.load_rules_from_json(engine.to_json())
        assert again.list_rules() == engine.list_rules()

    def test_yaml_round_trip(self, engine, tmp_path):
        path = tmp_path / "rules.yaml"
        engine.save_rules_to_file(str(path))

        reloaded = RulesEngine()
        reloaded.load_rules_from_file(str(path))
        assert reloaded.list_rules() == engine.list_rules()

    def test_missing_file(self, engine, tmp_path):
        with pytest.raises(RuleFileError):
            engine.load_rules_from_file(str(tmp_path / "missing.json"))
        assert len(engine.list_rules()) == 3

    def test_get_replace_remove(self, engine):
        assert engine.get_rule("new-customer").priority == 5
        assert engine.get_rule("unknown") is None

        assert engine.replace_rule(make_rule("new-customer", 50))
        assert engine.list_rules()[0].id == "new-customer"
        assert not engine.replace_rule(make_rule("ghost", 1))

        assert engine.remove_rule("vip-customer")
        assert not engine.remove_rule("vip-customer")
        assert [r.id for r in engine.list_rules()] == ["new-customer", "any-member"]

        engine.clear()
        assert engine.evaluate({"age": 30}) == []
