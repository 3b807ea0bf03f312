"""Breakpoint resolution: map a viewport width onto tiered configuration values."""

import math
from enum import Enum

from masonry_flow.models.layout_models import ResolvedConfig


class BreakpointError(ValueError):
    """Raised for breakpoint tables that cannot be ordered numerically."""


class BreakpointPolicy(str, Enum):
    # key <= width: a width sitting exactly on a boundary adopts the new tier.
    INCLUSIVE = "inclusive"
    # key < width: a boundary width keeps the previous tier.
    STRICT = "strict"

    @classmethod
    def coerce(cls, value) -> "BreakpointPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise BreakpointError(f"Unknown breakpoint policy: {value!r}") from None


def _coerce_key(key) -> float:
    if isinstance(key, bool):
        raise BreakpointError(f"Breakpoint key {key!r} is not a number")
    try:
        number = float(str(key).strip()) if isinstance(key, str) else float(key)
    except (TypeError, ValueError):
        raise BreakpointError(f"Breakpoint key {key!r} is not a number") from None
    if math.isnan(number) or math.isinf(number):
        raise BreakpointError(f"Breakpoint key {key!r} is not a finite number")
    if number < 0:
        raise BreakpointError(f"Breakpoint key {key!r} is negative")
    return number


def normalize_breakpoints(table) -> list[tuple[float, object]]:
    """
    Return the table as (threshold, value) pairs sorted ascending.

    Keys may be numbers or numeric strings; anything else is rejected so no
    comparison ever runs against a NaN.
    """
    if not table:
        return []
    pairs = {}
    for key, value in dict(table).items():
        threshold = _coerce_key(key)
        if threshold in pairs:
            raise BreakpointError(f"Duplicate breakpoint threshold {threshold:g}")
        pairs[threshold] = value
    return sorted(pairs.items(), key=lambda pair: pair[0])


def resolve_breakpoint(table, width, default, policy=BreakpointPolicy.INCLUSIVE):
    """
    Resolve the value the table assigns to `width`.

    Args:
        table: Mapping of width threshold -> value.
        width: Current width, or None when no width has been observed yet.
        default: Value used before any width is known, and the starting value
            for the inclusive fold.
        policy: Which comparison selects a tier.

    Returns:
        The value of the last threshold (ascending) that satisfies the policy.
    """
    if width is None:
        return default
    policy = BreakpointPolicy.coerce(policy)
    pairs = normalize_breakpoints(table)

    if policy is BreakpointPolicy.STRICT:
        # Wrapper-level resolution starts from the smallest tier.
        value = pairs[0][1] if pairs else default
        for threshold, tier_value in pairs:
            if threshold < width:
                value = tier_value
        return value

    value = default
    for threshold, tier_value in pairs:
        if threshold <= width:
            value = tier_value
    return value


def clamp_column_count(value) -> int:
    """Coerce a resolved column value to an int of at least 1."""
    if isinstance(value, bool):
        raise BreakpointError(f"Column count {value!r} is not a number")
    try:
        count = int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise BreakpointError(f"Column count {value!r} is not a number") from None
    return max(1, count)


def resolve_config(column_table, gutter_table, width, default_columns, default_gutter,
                   policy=BreakpointPolicy.INCLUSIVE) -> ResolvedConfig:
    """Resolve column count and gutter together from a single width sample."""
    column_count = resolve_breakpoint(column_table, width, default_columns, policy)
    gutter = resolve_breakpoint(gutter_table, width, default_gutter, policy)
    return ResolvedConfig(column_count=clamp_column_count(column_count), gutter=gutter)
