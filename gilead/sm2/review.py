"""
Review - Rating Flow for a Review Session

Ties the scheduler and the state store together into one logical
rating operation.

Main workflow:
1. Validate the quality rating
2. Load prior card state (or synthesize the default for unseen cards)
3. Schedule the card
4. Stamp last_reviewed and save the state
5. Update progress and session tallies

A storage failure in step 4 or 5 is reported on the outcome, never
raised; the in-session counters advance regardless. Stored progress is
re-read before every increment and left alone when that read fails.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable
import logging

from gilead.sm2.card_state import CardScheduleState, default_state
from gilead.sm2.progress import GroupKey, SessionStats
from gilead.sm2.scheduler import schedule, validate_quality
from gilead.sm2.state_store import CardStateStore, ProgressStore
from gilead.sm2.storage import KeyValueStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RatingOutcome:
    """Result of rating one card."""
    card_id: str
    state: CardScheduleState
    state_saved: bool
    progress_saved: bool


class ReviewSession:
    """
    One learner's review session on one device.

    Calls for the same card must not overlap; the store has no
    compare-and-swap.
    """

    def __init__(self, store: KeyValueStore, clock: Clock = utc_now):
        self.card_states = CardStateStore(store)
        self.progress_store = ProgressStore(store)
        self.clock = clock
        self.progress = self.progress_store.load()
        self.stats = SessionStats()

    def rate(self, card_id: str, group_key: GroupKey, quality: int) -> RatingOutcome:
        """
        Rate a card and persist its new schedule.

        Args:
            card_id: Stable card identifier
            group_key: Grouping key for progress (curriculum week)
            quality: Recall quality, 0-5

        Returns:
            RatingOutcome with the new state and persistence results

        Raises:
            InvalidArgument: If quality is outside 0-5 (nothing is read or written)
        """
        quality = validate_quality(quality)
        now = self.clock()

        prior = self.card_states.get(card_id)
        if prior is None:
            prior = default_state()

        state = schedule(quality, prior, now=now)
        state.last_reviewed = now
        state_saved = self.card_states.put(card_id, state)

        self.progress.increment(group_key)
        progress_saved = self.progress_store.increment(group_key)
        self.stats.record(quality)

        logger.debug(
            "Rated %s q=%d -> rep=%d interval=%d ease=%.2f",
            card_id, quality, state.repetition, state.interval, state.ease_factor
        )

        return RatingOutcome(
            card_id=card_id,
            state=state,
            state_saved=state_saved,
            progress_saved=progress_saved,
        )

    def restart(self) -> None:
        """Start another pass over the deck with fresh session tallies."""
        self.stats.reset()
