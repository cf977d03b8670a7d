"""Expansion of preset shorthands into six-field cron expressions."""

from __future__ import annotations

import re

from .errors import ExpressionError, PresetBoundsError

NAMED_PRESETS: dict[str, str] = {
    "@every_second": "* * * * * *",
    "@every_minute": "0 * * * * *",
    "@hourly": "0 0 * * * *",
    "@daily": "0 0 0 * * *",
    "@weekly": "0 0 0 * * 0",
    "@monthly": "0 0 0 1 * *",
    "@yearly": "0 0 0 1 1 *",
    "@annually": "0 0 0 1 1 *",
}

# Templates for @every_<n>_<unit>; finer fields are pinned to their minimum
EVERY_UNIT_TEMPLATES: dict[str, str] = {
    "seconds": "*/{n} * * * * *",
    "minutes": "0 */{n} * * * *",
    "hours": "0 0 */{n} * * *",
    "dayOfMonth": "0 0 0 */{n} * *",
    "months": "0 0 0 1 */{n} *",
    "dayOfWeek": "0 0 0 * * */{n}",
}

DAY_NAMES: dict[str, int] = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

EVERY_PATTERN = re.compile(r"^@every_(-?\w+?)_(\w+)$")
AT_PATTERN = re.compile(r"^@at_(-?[0-9]+):(-?[0-9]+)$")
ON_PATTERN = re.compile(r"^@on_([a-zA-Z]+)$")
BETWEEN_PATTERN = re.compile(r"^@between_(-?[0-9]+)_(-?[0-9]+)$")


def normalize_expression(expression: str) -> str:
    """Expand a preset or tidy a six-field expression.

    Args:
        expression: A six-field cron string or an ``@`` preset.

    Returns:
        The canonical six-field form, fields separated by single spaces.

    Raises:
        PresetBoundsError: If a preset's numeric parameter is out of bounds.
        ExpressionError: If the preset is unknown or the field count is wrong.
    """
    if not isinstance(expression, str):
        raise ExpressionError(f"Cron expression must be a string, got {type(expression).__name__}")

    expr = expression.strip()
    if expr.startswith("@"):
        return _expand_preset(expr)

    parts = expr.split()
    if len(parts) != 6:
        raise ExpressionError(
            f"Cron expression must have 6 fields, got {len(parts)}: '{expression}'",
            expression,
        )
    return " ".join(parts)


def _expand_preset(expr: str) -> str:
    """Expand one ``@`` preset."""
    if expr in NAMED_PRESETS:
        return NAMED_PRESETS[expr]

    if match := EVERY_PATTERN.match(expr):
        value, unit = match.group(1), match.group(2)
        if not (value.isascii() and value.isdigit()) or int(value) <= 0:
            raise PresetBoundsError(f"Invalid value in custom preset: {expr}", expr)
        if unit not in EVERY_UNIT_TEMPLATES:
            units = ", ".join(EVERY_UNIT_TEMPLATES)
            raise ExpressionError(f"Unknown unit '{unit}' in {expr}. Use one of: {units}", expr)
        return EVERY_UNIT_TEMPLATES[unit].format(n=int(value))

    if match := AT_PATTERN.match(expr):
        hour, minute = int(match.group(1)), int(match.group(2))
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise PresetBoundsError(f"Invalid time in custom preset: {expr}", expr)
        return f"0 {minute} {hour} * * *"

    if match := ON_PATTERN.match(expr):
        day = match.group(1).lower()
        if day not in DAY_NAMES:
            raise ExpressionError(f"Unknown day name in preset: {expr}", expr)
        return f"0 0 0 * * {DAY_NAMES[day]}"

    if match := BETWEEN_PATTERN.match(expr):
        start, end = int(match.group(1)), int(match.group(2))
        if not (0 <= start <= 23 and 0 <= end <= 23) or start >= end:
            raise PresetBoundsError(f"Invalid hour range in custom preset: {expr}", expr)
        return f"0 0 {start}-{end} * * *"

    raise ExpressionError(f"Unknown preset: {expr}", expr)
