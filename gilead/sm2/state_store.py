"""
State Store - Card State and Progress Persistence

Typed layer over a KeyValueStore. Reads degrade to "absent" and writes
report failure instead of raising, so a broken or corrupt medium never
blocks a review session.
"""

from __future__ import annotations
from typing import Optional
import logging

from gilead.sm2.card_state import CardScheduleState, deserialize_state, serialize_state
from gilead.sm2.constants import CARD_KEY_PREFIX, PROGRESS_KEY
from gilead.sm2.errors import StorageUnavailable
from gilead.sm2.progress import GroupKey, ReviewProgress
from gilead.sm2.storage import KeyValueStore

logger = logging.getLogger(__name__)


def card_key(card_id: str) -> str:
    """Storage key for a card's scheduling state."""
    return f"{CARD_KEY_PREFIX}{card_id}"


class CardStateStore:
    """
    Latest scheduling state per card identifier.

    get() returns None for never-rated cards, unreadable storage and
    malformed entries alike; the caller falls back to default_state().
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self, card_id: str) -> Optional[CardScheduleState]:
        """
        Load a card's state.

        Args:
            card_id: Stable card identifier

        Returns:
            CardScheduleState if a valid entry exists, None otherwise
        """
        try:
            text = self.store.get_text(card_key(card_id))
        except StorageUnavailable as exc:
            logger.warning("Card state for %s unavailable: %s", card_id, exc)
            return None

        if text is None:
            return None

        state = deserialize_state(text)
        if state is None:
            logger.warning("Ignoring malformed card state for %s", card_id)
        return state

    def put(self, card_id: str, state: CardScheduleState) -> bool:
        """
        Overwrite a card's state (last write wins).

        Returns:
            True if persisted, False if the write failed (logged)
        """
        try:
            self.store.put_text(card_key(card_id), serialize_state(state))
        except StorageUnavailable as exc:
            logger.warning("Could not save card state for %s: %s", card_id, exc)
            return False
        return True


class ProgressStore:
    """Persisted ReviewProgress mapping (grouping key -> rating count)."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> ReviewProgress:
        """
        Load progress, or an empty mapping if missing, unreadable or malformed.
        """
        try:
            text = self.store.get_text(PROGRESS_KEY)
        except StorageUnavailable as exc:
            logger.warning("Review progress unavailable: %s", exc)
            return ReviewProgress()

        progress = ReviewProgress.from_json(text)
        if progress is None:
            if text is not None:
                logger.warning("Ignoring malformed review progress")
            return ReviewProgress()
        return progress

    def add(self, counts: dict) -> bool:
        """
        Add counts onto the stored mapping (read, add, write).

        Counts written by other sessions are kept. If the read fails
        nothing is written, so stored counts never go down.

        Args:
            counts: Grouping key -> number of ratings to add

        Returns:
            True if persisted, False if the read or write failed (logged)
        """
        try:
            text = self.store.get_text(PROGRESS_KEY)
        except StorageUnavailable as exc:
            logger.warning("Review progress unavailable, not updating: %s", exc)
            return False

        progress = ReviewProgress.from_json(text)
        if progress is None:
            if text is not None:
                logger.warning("Replacing malformed review progress")
            progress = ReviewProgress()

        for key, count in counts.items():
            progress.counts[str(key)] = progress.count(key) + count
        return self.save(progress)

    def increment(self, key: GroupKey) -> bool:
        """Record one rating for a grouping key in the stored mapping."""
        return self.add({key: 1})

    def save(self, progress: ReviewProgress) -> bool:
        """
        Overwrite the stored progress mapping.

        Returns:
            True if persisted, False if the write failed (logged)
        """
        try:
            self.store.put_text(PROGRESS_KEY, progress.to_json())
        except StorageUnavailable as exc:
            logger.warning("Could not save review progress: %s", exc)
            return False
        return True
