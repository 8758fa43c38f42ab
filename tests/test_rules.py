"""
test_rules.py — color rule evaluation, default bands and rule-set editing.
"""

import pytest

from regionwatch.models import ColorRule
from regionwatch.rules import (
    DEFAULT_COLOR,
    default_color_rules,
    evaluate,
    hex_to_hsl,
    new_rule,
    remove_rule,
    replace_rule,
)

BLUE, GREEN, AMBER, RED = "#3b82f6", "#10b981", "#f59e0b", "#ef4444"


class TestEvaluate:

    @pytest.mark.parametrize(
        "value, expected",
        [(-5, BLUE), (-0.01, BLUE), (0, GREEN), (14.9, GREEN), (15, AMBER), (20, AMBER),
         (25, RED), (30, RED)],
    )
    def test_default_bands(self, value, expected):
        assert evaluate(value, default_color_rules()) == expected

    def test_empty_rules_give_default_color(self):
        assert evaluate(12.0, []) == DEFAULT_COLOR
        assert evaluate(12.0, ()) == DEFAULT_COLOR

    def test_no_match_gives_default_color(self):
        rules = [ColorRule(id="a", operator=">", threshold=100, color="#000000")]
        assert evaluate(50, rules) == DEFAULT_COLOR

    def test_rule_order_at_rest_does_not_matter(self):
        rules = list(default_color_rules())
        assert evaluate(30, rules) == evaluate(30, list(reversed(rules))) == RED

    def test_highest_satisfied_threshold_wins(self):
        rules = [
            ColorRule(id="hi", operator=">", threshold=20, color="hi"),
            ColorRule(id="lo", operator=">", threshold=10, color="lo"),
        ]
        assert evaluate(30, rules) == "hi"
        assert evaluate(15, rules) == "lo"

    def test_below_rule_does_not_hide_higher_band(self):
        rules = [
            ColorRule(id="cold", operator="<", threshold=50, color="cold"),
            ColorRule(id="warm", operator=">=", threshold=10, color="warm"),
        ]
        # Sorted: warm(10), cold(50); both hold at 20, the 50 rule is last.
        assert evaluate(20, rules) == "cold"
        assert evaluate(60, rules) == "warm"

    def test_equal_thresholds_later_rule_wins(self):
        first = ColorRule(id="1", operator=">=", threshold=5, color="first")
        second = ColorRule(id="2", operator="<=", threshold=5, color="second")
        assert evaluate(5, [first, second]) == "second"
        assert evaluate(5, [second, first]) == "first"

    def test_equals_operator_is_exact(self):
        rules = [ColorRule(id="eq", operator="=", threshold=0.3, color="eq")]
        assert evaluate(0.3, rules) == "eq"
        assert evaluate(0.1 + 0.2, rules) == DEFAULT_COLOR

    def test_deterministic(self):
        rules = default_color_rules()
        assert {evaluate(17.5, rules) for _ in range(10)} == {AMBER}

    def test_input_is_not_reordered(self):
        rules = [
            ColorRule(id="b", operator=">", threshold=20, color="b"),
            ColorRule(id="a", operator=">", threshold=10, color="a"),
        ]
        evaluate(30, rules)
        assert [r.id for r in rules] == ["b", "a"]


class TestRuleSetEditing:

    def test_unknown_operator_rejected(self):
        with pytest.raises(ValueError):
            ColorRule(id="x", operator="!=", threshold=1, color="#000000")

    def test_new_rule_defaults(self):
        rule = new_rule("#123456")
        assert (rule.operator, rule.threshold, rule.color) == (">", 20.0, "#123456")
        assert rule.id != new_rule("#123456").id

    def test_replace_rule_returns_new_tuple(self):
        rules = default_color_rules()
        updated = replace_rule(rules, "3", threshold=18.0, color="#ffffff")
        assert updated[2].threshold == 18.0 and updated[2].color == "#ffffff"
        assert rules[2].threshold == 15.0
        assert replace_rule(rules, "missing", threshold=1.0) == rules

    def test_remove_rule(self):
        rules = remove_rule(default_color_rules(), "1")
        assert [r.id for r in rules] == ["2", "3", "4"]
        assert evaluate(-5, rules) == DEFAULT_COLOR


class TestHexToHsl:

    @pytest.mark.parametrize(
        "hex_color, expected",
        [
            ("#ffffff", "hsl(0, 0%, 100%)"),
            ("#000000", "hsl(0, 0%, 0%)"),
            ("#ff0000", "hsl(0, 100%, 50%)"),
            ("#00ff00", "hsl(120, 100%, 50%)"),
            ("#0000ff", "hsl(240, 100%, 50%)"),
        ],
    )
    def test_known_colors(self, hex_color, expected):
        assert hex_to_hsl(hex_color) == expected

    def test_invalid_token(self):
        with pytest.raises(ValueError):
            hex_to_hsl("red")
