"""Color classification rules — value + rule set → display color."""

import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from operator import eq, ge, gt, le, lt

from regionwatch.models import ColorRule

DEFAULT_COLOR = "#94a3b8"  # slate-400, "unclassified"

_PREDICATES: dict[str, Callable[[float, float], bool]] = {
    "=": eq,
    "<": lt,
    ">": gt,
    "<=": le,
    ">=": ge,
}


def evaluate(value: float, rules: Iterable[ColorRule]) -> str:
    """Return the color of the last matching rule, in ascending threshold order.

    Rules are stably sorted by threshold, so the highest satisfied threshold
    decides and, among rules sharing a threshold, the later one wins. `=`
    compares floats exactly. When nothing matches (including an empty rule set)
    the unclassified DEFAULT_COLOR is returned.

    Args:
        value: The measured value (e.g. temperature in °C).
        rules: Any finite collection of rules. Not modified.

    Returns:
        A color token.
    """
    color = DEFAULT_COLOR
    for rule in sorted(rules, key=lambda r: r.threshold):
        if _PREDICATES[rule.operator](value, rule.threshold):
            color = rule.color
    return color


def default_color_rules() -> tuple[ColorRule, ...]:
    """Temperature bands applied to newly drawn regions."""
    return (
        ColorRule(id="1", operator="<", threshold=0.0, color="#3b82f6"),  # cold
        ColorRule(id="2", operator=">=", threshold=0.0, color="#10b981"),  # cool
        ColorRule(id="3", operator=">=", threshold=15.0, color="#f59e0b"),  # warm
        ColorRule(id="4", operator=">=", threshold=25.0, color="#ef4444"),  # hot
    )


def new_rule(color: str, operator: str = ">", threshold: float = 20.0) -> ColorRule:
    """Create a rule with a fresh id."""
    return ColorRule(id=uuid.uuid4().hex, operator=operator, threshold=threshold, color=color)


def replace_rule(
    rules: Iterable[ColorRule], rule_id: str, **changes: object
) -> tuple[ColorRule, ...]:
    """Return a new rule set with `rule_id` updated. Unknown ids leave it unchanged."""
    return tuple(replace(r, **changes) if r.id == rule_id else r for r in rules)  # type: ignore[arg-type]


def remove_rule(rules: Iterable[ColorRule], rule_id: str) -> tuple[ColorRule, ...]:
    return tuple(r for r in rules if r.id != rule_id)


def hex_to_hsl(hex_color: str) -> str:
    """Convert "#rrggbb" to a CSS "hsl(h, s%, l%)" string.

    Raises:
        ValueError: If the token is not a 6-digit hex color.
    """
    digits = hex_color.lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected #rrggbb, got {hex_color!r}")
    r, g, b = (int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))

    hi = max(r, g, b)
    lo = min(r, g, b)
    diff = hi - lo
    lightness = (hi + lo) / 2

    if diff == 0:
        return f"hsl(0, 0%, {round(lightness * 100)}%)"

    sat = diff / (2 - hi - lo) if lightness > 0.5 else diff / (hi + lo)
    if hi == r:
        hue = ((g - b) / diff + (6 if g < b else 0)) / 6
    elif hi == g:
        hue = ((b - r) / diff + 2) / 6
    else:
        hue = ((r - g) / diff + 4) / 6

    return f"hsl({round(hue * 360)}, {round(sat * 100)}%, {round(lightness * 100)}%)"
