"""Unit tests for sink dispatch of decoder outcomes."""

from __future__ import annotations

import pytest

from serenity.streaming.outcomes import CallbackSink, Delta, Done, Error, dispatch, is_terminal
from tests.helpers import RecordingSink, aiter_chunks


@pytest.mark.asyncio
async def test_dispatch_forwards_deltas_then_done(recording_sink: RecordingSink) -> None:
    terminal = await dispatch(aiter_chunks([Delta("a"), Delta("b"), Done()]), recording_sink)

    assert terminal == Done()
    assert recording_sink.events == [("delta", "a"), ("delta", "b"), ("done", None)]


@pytest.mark.asyncio
async def test_dispatch_calls_on_error_once_and_stops(recording_sink: RecordingSink) -> None:
    terminal = await dispatch(aiter_chunks([Delta("a"), Error("boom"), Done()]), recording_sink)

    assert terminal == Error("boom")
    assert recording_sink.events == [("delta", "a"), ("error", "boom")]


@pytest.mark.asyncio
async def test_dispatch_treats_exhausted_source_as_done(recording_sink: RecordingSink) -> None:
    terminal = await dispatch(aiter_chunks([Delta("a")]), recording_sink)

    assert terminal == Done()
    assert recording_sink.events == [("delta", "a"), ("done", None)]


@pytest.mark.asyncio
async def test_callback_sink_invokes_optional_callbacks() -> None:
    deltas: list[str] = []
    errors: list[str] = []
    sink = CallbackSink(on_delta=deltas.append, on_error=errors.append)

    await dispatch(aiter_chunks([Delta("hi"), Error("nope")]), sink)
    sink.on_done()

    assert deltas == ["hi"]
    assert errors == ["nope"]


def test_is_terminal() -> None:
    assert is_terminal(Done())
    assert is_terminal(Error("x"))
    assert not is_terminal(Delta("x"))
