"""Unit tests for journal drift workflow."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from serenity.api.schemas.journal import DriftAnalysis, EntryScore, JournalEntry
from serenity.services.journal_service import JournalService, NotEnoughEntriesError, apply_entry_scores


def _entry(entry_id: str, day: int) -> JournalEntry:
    return JournalEntry(id=entry_id, content=f"entry {entry_id}", created_at=datetime(2026, 2, day, tzinfo=UTC))


ANALYSIS = DriftAnalysis(
    entry_scores=[
        EntryScore(index=1, sentiment=0.2, emotion="sad"),
        EntryScore(index=2, sentiment=0.6, emotion="calm"),
        EntryScore(index=9, sentiment=0.9, emotion="grateful"),
    ],
    drift_direction="improving",
    summary="Things are looking up.",
)


class FakeDriftClient:
    def __init__(self, analysis: DriftAnalysis) -> None:
        self._analysis = analysis
        self.calls: list[list[JournalEntry]] = []

    async def analyze(self, entries):
        self.calls.append(list(entries))
        return self._analysis


def test_apply_entry_scores_matches_one_based_index_and_ignores_out_of_range() -> None:
    entries = [_entry("a", 1), _entry("b", 2), _entry("c", 3)]

    updated = apply_entry_scores(entries, ANALYSIS)

    assert [(e.sentiment_score, e.mood_label) for e in updated] == [(0.2, "sad"), (0.6, "calm"), (None, None)]
    assert entries[0].sentiment_score is None


def test_apply_entry_scores_uses_first_score_for_duplicate_index() -> None:
    analysis = DriftAnalysis(
        entry_scores=[EntryScore(index=1, sentiment=0.1, emotion="angry"), EntryScore(index=1, sentiment=0.9, emotion="happy")],
        drift_direction="volatile",
        summary="Mixed.",
    )

    updated = apply_entry_scores([_entry("a", 1)], analysis)

    assert updated[0].mood_label == "angry"


@pytest.mark.asyncio
async def test_analyze_requires_two_entries() -> None:
    client = FakeDriftClient(ANALYSIS)
    service = JournalService(drift_client=client)

    with pytest.raises(NotEnoughEntriesError):
        await service.analyze([_entry("a", 1)])
    assert client.calls == []


@pytest.mark.asyncio
async def test_analyze_orders_entries_chronologically_before_scoring() -> None:
    client = FakeDriftClient(ANALYSIS)
    service = JournalService(drift_client=client)

    analysis, updated = await service.analyze([_entry("late", 5), _entry("early", 1)])

    assert analysis is ANALYSIS
    assert [e.id for e in client.calls[0]] == ["early", "late"]
    assert [(e.id, e.mood_label) for e in updated] == [("early", "sad"), ("late", "calm")]
