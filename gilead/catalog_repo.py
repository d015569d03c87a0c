"""
MongoDB repository for the flashcard catalog.

Read-only access to curriculum flashcards.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection

from gilead.schemas import Flashcard

# Load environment
load_dotenv()

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_DB_NAME = "gilead"
COLLECTION_NAME = "flashcards"
DEFAULT_LIMIT = 20  # Cards per session when no week is chosen

# Global connection pool (reused across requests)
_client: Optional[MongoClient] = None
_collection: Optional[Collection] = None


# ---- Connection Management ----

def get_collection() -> Collection:
    """
    Get a connection to the MongoDB flashcards collection.

    Returns:
        MongoDB collection object
    """
    global _client, _collection

    # Return cached collection if it exists
    if _collection is not None:
        return _collection

    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")

    _client = MongoClient(
        mongo_uri,
        maxPoolSize=10,
        minPoolSize=1,
        maxIdleTimeMS=60000
    )
    db = _client[os.getenv("MONGO_DB_NAME", DEFAULT_DB_NAME)]
    _collection = db[COLLECTION_NAME]

    return _collection


def _to_flashcards(docs) -> list[Flashcard]:
    cards = []
    for doc in docs:
        try:
            cards.append(Flashcard.model_validate(doc))
        except ValidationError as exc:
            logger.warning("Skipping invalid catalog entry %s: %s", doc.get("_id"), exc)
    return cards


# ---- Query Functions ----

def get_cards(week_number: Optional[int] = None, limit: int = DEFAULT_LIMIT) -> list[Flashcard]:
    """
    Get flashcards for a review session, ordered by week.

    Args:
        week_number: If given, every card from that week (no limit)
        limit: Maximum number of cards when no week is given

    Returns:
        List of Flashcard models
    """
    collection = get_collection()

    if week_number is not None:
        cursor = collection.find({"week_number": week_number}).sort("week_number", ASCENDING)
    else:
        cursor = collection.find({}).sort("week_number", ASCENDING).limit(limit)

    return _to_flashcards(cursor)


def get_card(card_id: str) -> Optional[Flashcard]:
    """
    Get a single flashcard by its identifier.

    Returns:
        Flashcard, or None if not found
    """
    doc = get_collection().find_one({"id": card_id})
    if doc is None:
        return None
    cards = _to_flashcards([doc])
    return cards[0] if cards else None
