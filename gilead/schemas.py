"""
Pydantic models for the flashcard catalog.

These models define the structure of catalog documents. The scheduler
only needs `id` and `week_number`; the rest is carried for display.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Flashcard(BaseModel):
    """A curriculum flashcard."""
    id: str = Field(..., min_length=1, description="Stable card identifier")
    question: str = Field(..., description="Prompt shown on the front")
    answer: str = Field(..., description="Answer revealed on the back")
    week_number: int = Field(..., ge=0, description="Curriculum week (progress grouping key)")
    tags: list[str] = Field(default_factory=list)
    difficulty: str = Field(default="", description="Author-assigned difficulty label")
