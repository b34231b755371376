"""Weekly availability overlap scoring.

Slots look like ``TimeSlot(day="Monday", start_time="09:00", end_time="13:00")``.
A job slot counts as covered when the candidate has any slot on the same day
whose time range overlaps it.
"""
import logging
from typing import Optional, Sequence

from src.matching.exceptions import InvalidInputError
from src.matching.types import TimeSlot
from src.matching.utils import normalize_term, round_half_up

logger = logging.getLogger(__name__)


def parse_time_to_minutes(value: Optional[str]) -> int:
    """
    Parse ``"HH:MM"`` into minutes since midnight.

    A bare hour (``"9"``) is read as ``"09:00"``.

    Raises:
        InvalidInputError: If the value is empty or not numeric
    """
    if not value or not str(value).strip():
        raise InvalidInputError(value, "empty time")

    parts = str(value).strip().split(":")
    try:
        hours = int(parts[0])
        minutes = int(parts[1]) if len(parts) > 1 and parts[1] != "" else 0
    except ValueError as e:
        raise InvalidInputError(value, "non-numeric hour or minute") from e
    return hours * 60 + minutes


def _slot_range(slot: TimeSlot) -> Optional[tuple[int, int]]:
    try:
        return parse_time_to_minutes(slot.start_time), parse_time_to_minutes(slot.end_time)
    except InvalidInputError as e:
        logger.debug("Ignoring slot %s: %s", slot, e)
        return None


def slots_overlap(a: TimeSlot, b: TimeSlot) -> bool:
    """True when two time ranges overlap; touching endpoints do not count.

    Days are not compared here. Unparseable times never overlap.
    """
    range_a = _slot_range(a)
    range_b = _slot_range(b)
    if range_a is None or range_b is None:
        return False
    a_start, a_end = range_a
    b_start, b_end = range_b
    return a_start < b_end and b_start < a_end


def _covers(candidate_slot: TimeSlot, job_slot: TimeSlot) -> bool:
    if not candidate_slot.day or not job_slot.day:
        return False
    if normalize_term(candidate_slot.day) != normalize_term(job_slot.day):
        return False
    return slots_overlap(candidate_slot, job_slot)


def availability_score(
    candidate_slots: Sequence[TimeSlot] | None,
    job_slots: Sequence[TimeSlot] | None,
) -> int:
    """
    Score the share of job slots the candidate can cover (0-100).

    A job without slots has no constraint and scores 100. A job with slots
    against a candidate without any scores 0.
    """
    if not job_slots:
        return 100
    if not candidate_slots:
        return 0

    matched = sum(
        1
        for job_slot in job_slots
        if any(_covers(c_slot, job_slot) for c_slot in candidate_slots)
    )
    return round_half_up(matched / len(job_slots) * 100)
