from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Protocol, Union


@dataclass(frozen=True)
class Delta:
    """Incremental fragment of assistant text."""

    text: str


@dataclass(frozen=True)
class Done:
    """Normal end of the stream."""


@dataclass(frozen=True)
class Error:
    """Terminal failure carrying a user-facing message."""

    message: str


DecoderOutcome = Union[Delta, Done, Error]


def is_terminal(outcome: DecoderOutcome) -> bool:
    return isinstance(outcome, (Done, Error))


class DeltaSink(Protocol):
    """Receiver for decoded stream outcomes."""

    def on_delta(self, text: str) -> None:
        """Append an incremental text fragment to the visible transcript."""

    def on_done(self) -> None:
        """Mark the response as complete."""

    def on_error(self, message: str) -> None:
        """Surface a terminal stream failure."""


class CallbackSink:
    """Adapts plain callables to the ``DeltaSink`` contract."""

    def __init__(
        self,
        on_delta: Callable[[str], None],
        on_done: Callable[[], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self._on_delta = on_delta
        self._on_done = on_done
        self._on_error = on_error

    def on_delta(self, text: str) -> None:
        self._on_delta(text)

    def on_done(self) -> None:
        if self._on_done is not None:
            self._on_done()

    def on_error(self, message: str) -> None:
        if self._on_error is not None:
            self._on_error(message)


async def dispatch(outcomes: AsyncIterator[DecoderOutcome], sink: DeltaSink) -> DecoderOutcome:
    """Drive ``outcomes`` into ``sink`` and return the terminal outcome.

    Exactly one of ``on_done``/``on_error`` is called. A source that ends
    without a terminal outcome is treated as done.
    """
    try:
        async for outcome in outcomes:
            if isinstance(outcome, Delta):
                sink.on_delta(outcome.text)
            elif isinstance(outcome, Error):
                sink.on_error(outcome.message)
                return outcome
            else:
                sink.on_done()
                return outcome
    finally:
        aclose = getattr(outcomes, "aclose", None)
        if aclose is not None:
            await aclose()

    sink.on_done()
    return Done()
