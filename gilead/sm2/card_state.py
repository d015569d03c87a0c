"""
Card State - SM-2 Scheduling State and Serialization

Defines the per-card scheduling state and its lossless text form.

Key concepts:
- Repetition: consecutive successful recalls since the last lapse
- Interval: days until the next scheduled review
- Ease factor: multiplier controlling how fast the interval grows
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
import json
import math

from gilead.sm2.constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL,
    DEFAULT_REPETITION,
    MIN_EASE_FACTOR,
)


@dataclass
class CardScheduleState:
    """
    Scheduling state for a single flashcard.

    Written wholesale after every rating; never patched field by field.
    """
    repetition: int
    interval: int  # days
    ease_factor: float

    # Derived from interval at rating time
    next_review_at: Optional[datetime] = None

    # Stamped by the caller, not by the scheduler
    last_reviewed: Optional[datetime] = None


def default_state() -> CardScheduleState:
    """
    State for a card that has never been rated.

    Returns:
        CardScheduleState with repetition=0, interval=1, ease_factor=2.5
    """
    return CardScheduleState(
        repetition=DEFAULT_REPETITION,
        interval=DEFAULT_INTERVAL,
        ease_factor=DEFAULT_EASE_FACTOR,
    )


# ---- Timestamps ----

def format_timestamp(value: datetime) -> str:
    """
    Format a datetime as UTC ISO-8601 with millisecond precision.

    Naive datetimes are assumed to already be UTC.

    Example: 2025-03-01T09:30:00.000Z
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing 'Z' as well as explicit offsets.

    Raises:
        ValueError: If the text is not a valid ISO-8601 timestamp
    """
    if not isinstance(text, str):
        raise TypeError(f"Timestamp must be a string, got {type(text).__name__}")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ---- Dict / JSON conversion ----

def to_dict(state: CardScheduleState) -> dict:
    """Convert state to its persisted mapping (camelCase field names)."""
    return {
        "repetition": state.repetition,
        "interval": state.interval,
        "easeFactor": state.ease_factor,
        "nextReviewAt": (
            format_timestamp(state.next_review_at)
            if state.next_review_at
            else None
        ),
        "lastReviewed": (
            format_timestamp(state.last_reviewed)
            if state.last_reviewed
            else None
        ),
    }


def _as_int(value, field: str) -> int:
    # bool is an int subclass; a persisted true/false is never a count
    if isinstance(value, bool):
        raise TypeError(f"{field} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise TypeError(f"{field} must be an integer, got {value!r}")


def from_dict(data: dict) -> CardScheduleState:
    """
    Build state from its persisted mapping, enforcing the state invariants.

    Raises:
        KeyError: If a required field is missing
        TypeError: If a field has the wrong type
        ValueError: If a value violates an invariant or a timestamp is invalid
        OverflowError: If an integer easeFactor does not fit in a float
    """
    if not isinstance(data, dict):
        raise TypeError(f"Card state must be an object, got {type(data).__name__}")

    repetition = _as_int(data["repetition"], "repetition")
    interval = _as_int(data["interval"], "interval")

    ease_factor = data["easeFactor"]
    if isinstance(ease_factor, bool) or not isinstance(ease_factor, (int, float)):
        raise TypeError(f"easeFactor must be a number, got {ease_factor!r}")
    ease_factor = float(ease_factor)

    if repetition < 0:
        raise ValueError(f"repetition must be >= 0, got {repetition}")
    if interval < 1:
        raise ValueError(f"interval must be >= 1, got {interval}")
    if not math.isfinite(ease_factor) or ease_factor < MIN_EASE_FACTOR:
        raise ValueError(f"easeFactor must be >= {MIN_EASE_FACTOR}, got {ease_factor}")

    next_review_at = data.get("nextReviewAt")
    last_reviewed = data.get("lastReviewed")

    return CardScheduleState(
        repetition=repetition,
        interval=interval,
        ease_factor=ease_factor,
        next_review_at=parse_timestamp(next_review_at) if next_review_at else None,
        last_reviewed=parse_timestamp(last_reviewed) if last_reviewed else None,
    )


def serialize_state(state: CardScheduleState) -> str:
    """Serialize state to JSON text (floats keep full precision)."""
    return json.dumps(to_dict(state))


def deserialize_state(text: Optional[str]) -> Optional[CardScheduleState]:
    """
    Parse JSON text back into state.

    Args:
        text: Stored JSON text, or None if nothing was stored

    Returns:
        CardScheduleState, or None if the text is missing or malformed
    """
    if text is None:
        return None
    try:
        return from_dict(json.loads(text))
    except (ValueError, TypeError, KeyError, OverflowError):
        # json.JSONDecodeError is a ValueError; OverflowError is an
        # integer easeFactor too large for a float
        return None
