"""
Scheduler - SM-2 Algorithm Logic

Pure SM-2 scheduling (no storage calls).

Main workflow:
1. Load prior state (caller's responsibility)
2. Validate the quality rating
3. Apply the lapse or success rule
4. Derive the due date from the new interval
5. Return the complete new state

This module handles ONLY the algorithm logic.
Storage I/O is handled by the state_store module.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional
import math

from gilead.sm2.card_state import CardScheduleState
from gilead.sm2.constants import (
    FIRST_INTERVAL,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
    SECOND_INTERVAL,
)
from gilead.sm2.errors import InvalidArgument


def validate_quality(quality: int) -> int:
    """
    Check that a quality rating is an integer in 0-5.

    Raises:
        InvalidArgument: If the rating is not an integer in range
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidArgument(f"Quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidArgument(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return int(quality)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """
    SM-2 ease update, floored at 1.3.

    Formula: EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    """
    distance = 5 - quality
    ease_factor = ease_factor + (0.1 - distance * (0.08 + distance * 0.02))
    if ease_factor < MIN_EASE_FACTOR:
        ease_factor = MIN_EASE_FACTOR
    return ease_factor


def next_interval(repetition: int, interval: int, ease_factor: float) -> int:
    """
    Interval after a successful recall, chosen from the prior repetition count.

    - 1st success: 1 day
    - 2nd success: 6 days
    - afterwards: ceil(interval * ease_factor)
    """
    if repetition == 0:
        return FIRST_INTERVAL
    if repetition == 1:
        return SECOND_INTERVAL
    return math.ceil(interval * ease_factor)


def due_date(now: datetime, interval: int) -> datetime:
    """
    Moment a card comes due, interval whole calendar days after now.

    Month and year roll over naturally. Dates past year 9999 saturate at
    datetime.max; the interval itself is never capped.
    """
    try:
        return now + timedelta(days=interval)
    except OverflowError:
        if now.tzinfo is None:
            return datetime.max
        return datetime.max.replace(tzinfo=timezone.utc)


def schedule(
    quality: int,
    prior: CardScheduleState,
    now: Optional[datetime] = None
) -> CardScheduleState:
    """
    Compute the next scheduling state for a card.

    Only repetition, interval and ease_factor are read from the prior
    state. The returned state has last_reviewed unset; stamping it is
    the caller's job.

    Args:
        quality: Recall quality, 0 (blackout) to 5 (perfect)
        prior: Current state (use default_state() for unseen cards)
        now: Moment of rating (defaults to now, UTC)

    Returns:
        New CardScheduleState with next_review_at = now + interval days

    Raises:
        InvalidArgument: If quality is outside 0-5
    """
    quality = validate_quality(quality)

    if now is None:
        now = datetime.now(timezone.utc)

    if quality < PASSING_QUALITY:
        # Lapse: restart the streak, keep the ease
        repetition = 0
        interval = 1
        ease_factor = prior.ease_factor
    else:
        interval = next_interval(prior.repetition, prior.interval, prior.ease_factor)
        repetition = prior.repetition + 1
        ease_factor = next_ease_factor(prior.ease_factor, quality)

    next_review_at = due_date(now, interval)

    return CardScheduleState(
        repetition=repetition,
        interval=interval,
        ease_factor=ease_factor,
        next_review_at=next_review_at,
    )
