"""Parsing of single cron fields into value sets."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ExpressionError


@dataclass(frozen=True)
class FieldSpec:
    """Name and inclusive domain of one cron field."""

    name: str
    min_value: int
    max_value: int

    @property
    def domain(self) -> tuple[int, ...]:
        return tuple(range(self.min_value, self.max_value + 1))


SECOND = FieldSpec("second", 0, 59)
MINUTE = FieldSpec("minute", 0, 59)
HOUR = FieldSpec("hour", 0, 23)
DAY_OF_MONTH = FieldSpec("day_of_month", 1, 31)
MONTH = FieldSpec("month", 1, 12)
DAY_OF_WEEK = FieldSpec("day_of_week", 0, 6)  # 0 = Sunday

# Order matches the textual expression: second minute hour dom month dow
FIELD_SPECS: tuple[FieldSpec, ...] = (SECOND, MINUTE, HOUR, DAY_OF_MONTH, MONTH, DAY_OF_WEEK)


def parse_field(text: str, spec: FieldSpec) -> tuple[int, ...]:
    """Parse one field expression into a sorted tuple of values.

    Supported forms, combinable with commas:
    - ``*``: every value in the domain
    - ``a``: a single value
    - ``a-b``: inclusive range
    - ``*/s``, ``a-b/s``, ``a/s``: every s-th value from the start

    Args:
        text: The field expression.
        spec: Field name and domain.

    Returns:
        De-duplicated, ascending values.

    Raises:
        ExpressionError: If a token is malformed or out of the domain.
    """
    text = text.strip()
    if not text:
        raise ExpressionError(f"Empty {spec.name} field")

    values: set[int] = set()
    for part in text.split(","):
        values.update(_parse_part(part.strip(), spec, text))

    return tuple(sorted(values))


def _parse_part(part: str, spec: FieldSpec, field_text: str) -> range:
    """Parse one comma-separated element of a field."""
    if not part:
        raise ExpressionError(f"Empty list element in {spec.name} field: '{field_text}'")

    step = 1
    if "/" in part:
        base, step_text = part.split("/", 1)
        step = _to_int(step_text, spec, part)
        if step <= 0:
            raise ExpressionError(f"Step must be positive in {spec.name} field: '{part}'")
    else:
        base = part

    if base == "*":
        start, end = spec.min_value, spec.max_value
    elif "-" in base:
        low, high = base.split("-", 1)
        start, end = _to_int(low, spec, part), _to_int(high, spec, part)
        if start > end:
            raise ExpressionError(f"Inverted range in {spec.name} field: '{part}'")
    else:
        start = _to_int(base, spec, part)
        # A bare value with a step runs to the end of the domain
        end = spec.max_value if "/" in part else start

    _check_bounds(start, spec, part)
    _check_bounds(end, spec, part)

    return range(start, end + 1, step)


def _to_int(token: str, spec: FieldSpec, part: str) -> int:
    token = token.strip()
    if not (token.isascii() and token.isdigit()):
        raise ExpressionError(f"Invalid value '{token}' in {spec.name} field: '{part}'")
    return int(token)


def _check_bounds(value: int, spec: FieldSpec, part: str) -> None:
    if not spec.min_value <= value <= spec.max_value:
        raise ExpressionError(
            f"Value {value} out of bounds ({spec.min_value}-{spec.max_value}) "
            f"in {spec.name} field: '{part}'"
        )
