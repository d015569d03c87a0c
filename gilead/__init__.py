"""Gilead curriculum flashcard review: SM-2 scheduling and persisted review state."""
