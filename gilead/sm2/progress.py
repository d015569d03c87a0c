"""
Review progress counters.

ReviewProgress is the persisted count of ratings per grouping key
(curriculum week). SessionStats tallies the current session only.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union
import json

from gilead.sm2.constants import PASSING_QUALITY, ReviewButton


GroupKey = Union[int, str]


@dataclass
class ReviewProgress:
    """
    Ratings performed per grouping key.

    Keys are stored as strings (JSON object keys), so week 3 and "3"
    are the same bucket. Counts only ever go up.
    """
    counts: dict[str, int] = field(default_factory=dict)

    def increment(self, key: GroupKey) -> int:
        """Add one rating to a group and return its new count."""
        key = str(key)
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def count(self, key: GroupKey) -> int:
        return self.counts.get(str(key), 0)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def to_json(self) -> str:
        return json.dumps(self.counts)

    @classmethod
    def from_json(cls, text: Optional[str]) -> Optional["ReviewProgress"]:
        """
        Parse stored progress.

        Returns:
            ReviewProgress, or None if the text is missing or malformed
        """
        if text is None:
            return None
        try:
            data = json.loads(text)
        except (ValueError, TypeError):
            # TypeError: the stored value is not text at all
            return None
        if not isinstance(data, dict):
            return None

        counts: dict[str, int] = {}
        for key, value in data.items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                return None
            counts[str(key)] = value
        return cls(counts=counts)


@dataclass
class SessionStats:
    """Again / Good / Easy tallies for the current session."""
    again: int = 0
    good: int = 0
    easy: int = 0

    def record(self, quality: int) -> None:
        """
        Count a rating.

        Lapses count as Again, a perfect 5 as Easy, everything else as Good.
        """
        if quality < PASSING_QUALITY:
            self.again += 1
        elif quality == ReviewButton.EASY:
            self.easy += 1
        else:
            self.good += 1

    @property
    def total(self) -> int:
        return self.again + self.good + self.easy

    def reset(self) -> None:
        self.again = 0
        self.good = 0
        self.easy = 0
