"""
SM-2 - Spaced Repetition Scheduler

Main API for flashcard review scheduling.

Quick start:
    from gilead import sm2

    # Pure algorithm (no storage)
    state = sm2.schedule(sm2.ReviewButton.GOOD, sm2.default_state())

    # Full rating flow with persistence
    session = sm2.ReviewSession(sm2.get_store())
    outcome = session.rate(card_id, week_number, sm2.ReviewButton.EASY)
"""

# Core scheduler API (algorithm logic)
from gilead.sm2.scheduler import schedule, validate_quality

# Card state
from gilead.sm2.card_state import (
    CardScheduleState,
    default_state,
    serialize_state,
    deserialize_state,
    format_timestamp,
    parse_timestamp,
)

# Storage API
from gilead.sm2.storage import (
    KeyValueStore,
    MemoryStore,
    SqlStore,
    MongoStore,
    get_store,
    get_database_url,
    is_test_mode,
)
from gilead.sm2.state_store import CardStateStore, ProgressStore

# Session flow
from gilead.sm2.progress import ReviewProgress, SessionStats
from gilead.sm2.review import ReviewSession, RatingOutcome

# Constants and errors
from gilead.sm2.constants import (
    ReviewButton,
    MIN_QUALITY,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    DEFAULT_EASE_FACTOR,
)
from gilead.sm2.errors import InvalidArgument, StorageUnavailable


__all__ = [
    # Core algorithm
    "schedule",
    "validate_quality",

    # Card state
    "CardScheduleState",
    "default_state",
    "serialize_state",
    "deserialize_state",
    "format_timestamp",
    "parse_timestamp",

    # Storage
    "KeyValueStore",
    "MemoryStore",
    "SqlStore",
    "MongoStore",
    "get_store",
    "get_database_url",
    "is_test_mode",
    "CardStateStore",
    "ProgressStore",

    # Session flow
    "ReviewProgress",
    "SessionStats",
    "ReviewSession",
    "RatingOutcome",

    # Constants
    "ReviewButton",
    "MIN_QUALITY",
    "MAX_QUALITY",
    "MIN_EASE_FACTOR",
    "DEFAULT_EASE_FACTOR",

    # Errors
    "InvalidArgument",
    "StorageUnavailable",
]
