from __future__ import annotations

import logging
from collections.abc import Sequence

from serenity.api.schemas.journal import DriftAnalysis, EntryScore, JournalEntry
from serenity.services.contracts import DriftAnalysisClientProtocol

logger = logging.getLogger(__name__)

MIN_ENTRIES_FOR_ANALYSIS = 2


class NotEnoughEntriesError(ValueError):
    """Drift analysis needs at least two journal entries."""


def apply_entry_scores(entries: Sequence[JournalEntry], analysis: DriftAnalysis) -> list[JournalEntry]:
    """Copy analyzed sentiment and emotion onto entries by 1-based index."""
    scores: dict[int, EntryScore] = {}
    for score in analysis.entry_scores:
        scores.setdefault(score.index, score)

    updated: list[JournalEntry] = []
    for position, entry in enumerate(entries, start=1):
        score = scores.get(position)
        if score is None:
            updated.append(entry)
            continue
        updated.append(entry.model_copy(update={"sentiment_score": score.sentiment, "mood_label": score.emotion}))
    return updated


class JournalService:
    """Runs emotional drift analysis over a user's journal entries."""

    def __init__(self, drift_client: DriftAnalysisClientProtocol) -> None:
        self._drift_client = drift_client

    async def analyze(self, entries: Sequence[JournalEntry]) -> tuple[DriftAnalysis, list[JournalEntry]]:
        if len(entries) < MIN_ENTRIES_FOR_ANALYSIS:
            raise NotEnoughEntriesError(
                f"Write at least {MIN_ENTRIES_FOR_ANALYSIS} journal entries to analyze drift."
            )

        ordered = sorted(entries, key=lambda entry: entry.created_at)
        analysis = await self._drift_client.analyze(ordered)
        logger.info(
            "journal drift applied",
            extra={"entries": len(ordered), "drift_direction": analysis.drift_direction},
        )
        return analysis, apply_entry_scores(ordered, analysis)
