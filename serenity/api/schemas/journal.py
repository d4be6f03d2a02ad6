from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

DriftDirection = Literal["improving", "declining", "stable", "volatile"]


class JournalEntryInput(BaseModel):
    content: str = Field(..., description="Journal entry text")
    created_at: str = Field(..., description="Entry creation timestamp as sent by the client")


class AnalyzeJournalRequest(BaseModel):
    entries: list[JournalEntryInput] = Field(
        default_factory=list,
        description="Journal entries in chronological order",
    )


class EntryScore(BaseModel):
    index: int = Field(..., description="1-based position of the entry in the analyzed sequence")
    sentiment: float = Field(..., description="Sentiment from 0.0 (very negative) to 1.0 (very positive)")
    emotion: str = Field(..., description="Dominant emotion label, e.g. hopeful/anxious/calm")


class DriftAnalysis(BaseModel):
    entry_scores: list[EntryScore] = Field(..., description="Per-entry sentiment and emotion")
    drift_direction: DriftDirection = Field(..., description="Overall direction of emotional drift")
    summary: str = Field(..., description="Short compassionate summary of emotional patterns")


class JournalEntry(BaseModel):
    id: str = Field(..., description="Journal entry identifier")
    content: str = Field(..., description="Journal entry text")
    created_at: datetime = Field(..., description="Entry creation timestamp")
    sentiment_score: float | None = Field(default=None, description="Last analyzed sentiment score")
    mood_label: str | None = Field(default=None, description="Last analyzed dominant emotion")
