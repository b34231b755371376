"""Shared helpers for the scoring modules."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable


def round_half_up(value: float, ndigits: int = 0) -> float | int:
    """Round halves away from zero (57.5 -> 58), unlike the builtin round().

    The value is first rounded to 9 places so float noise such as
    57.49999999999999 from a weighted sum still lands on the half.

    Returns an int when ndigits is 0.
    """
    exact = Decimal(repr(round(value, 9)))
    quantum = Decimal(1).scaleb(-ndigits)
    rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)
    if ndigits == 0:
        return int(rounded)
    return float(rounded)


def clamp_score(value: int) -> int:
    """Clamp a score into the closed 0-100 range."""
    return max(0, min(100, value))


def normalize_term(value: object) -> str:
    """Lowercase and trim a skill, day or industry name for comparison."""
    return str(value).strip().lower()


def normalized_set(values: Iterable[object] | None) -> set[str]:
    """Normalize a collection of terms, dropping blanks."""
    return {normalize_term(v) for v in values or [] if v is not None and normalize_term(v)}
