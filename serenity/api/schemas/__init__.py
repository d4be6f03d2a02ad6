from serenity.api.schemas.chat import ChatRequest, ChatTurnMessage
from serenity.api.schemas.journal import (
    AnalyzeJournalRequest,
    DriftAnalysis,
    EntryScore,
    JournalEntry,
    JournalEntryInput,
)

__all__ = [
    "AnalyzeJournalRequest",
    "ChatRequest",
    "ChatTurnMessage",
    "DriftAnalysis",
    "EntryScore",
    "JournalEntry",
    "JournalEntryInput",
]
