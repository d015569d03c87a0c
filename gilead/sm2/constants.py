"""
SM-2 Constants and Parameters

All configurable parameters for the SM-2 scheduler in one place.
"""

from enum import IntEnum


# ---- Review Buttons ----

class ReviewButton(IntEnum):
    """Quality ratings issued by the review screen."""
    AGAIN = 1   # Failed recall (lapse)
    GOOD = 3    # Recalled with some effort
    EASY = 5    # Perfect, effortless recall


# ---- Quality Domain ----

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3  # Ratings below this are lapses


# ---- Default State (first-time cards) ----

DEFAULT_REPETITION = 0
DEFAULT_INTERVAL = 1
DEFAULT_EASE_FACTOR = 2.5


# ---- Ease Factor ----

MIN_EASE_FACTOR = 1.3  # Hard floor, no ceiling


# ---- Interval Tiers ----

FIRST_INTERVAL = 1   # Days after the first successful recall
SECOND_INTERVAL = 6  # Days after the second successful recall


# ---- Storage Keys ----

CARD_KEY_PREFIX = "sm2:"
PROGRESS_KEY = "review_progress"

# Keys used by the browser build (single JSON blob per concern)
LEGACY_STATES_KEY = "gilead_sm2_states"
LEGACY_PROGRESS_KEY = "gilead_review_progress"
