from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from serenity.services.chat_session import ChatMessage, ChatSession, MoodPoint
from serenity.streaming.decoder import DEFAULT_MAX_BUFFER_CHARS, StreamDecoder, decode_response
from serenity.streaming.errors import TransportError
from serenity.streaming.outcomes import DeltaSink, Done, Error, dispatch
from serenity.streaming.transport import ChatTransport

logger = logging.getLogger(__name__)

SentimentScorer = Callable[[str], float]


@dataclass(frozen=True)
class ChatTurn:
    session: ChatSession
    outcome: Done | Error
    reply: str

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Done)


class _ReplyRecorder:
    """Collects deltas for the transcript and forwards every callback to the caller's sink."""

    def __init__(self, sink: DeltaSink | None) -> None:
        self._sink = sink
        self.chunks: list[str] = []
        self.outcome: Done | Error | None = None

    def on_delta(self, text: str) -> None:
        self.chunks.append(text)
        if self._sink is not None:
            self._sink.on_delta(text)

    def on_done(self) -> None:
        if self.outcome is not None:
            return
        self.outcome = Done()
        if self._sink is not None:
            self._sink.on_done()

    def on_error(self, message: str) -> None:
        if self.outcome is not None:
            return
        self.outcome = Error(message)
        if self._sink is not None:
            self._sink.on_error(message)


class ChatService:
    """Use-case service that runs one streaming chat exchange per user message."""

    def __init__(
        self,
        transport: ChatTransport,
        sentiment_scorer: SentimentScorer | None = None,
        max_buffer_chars: int = DEFAULT_MAX_BUFFER_CHARS,
    ) -> None:
        self._transport = transport
        self._sentiment_scorer = sentiment_scorer
        self._max_buffer_chars = max_buffer_chars

    async def send(self, session: ChatSession, text: str, sink: DeltaSink | None = None) -> ChatTurn:
        """Append the user message, stream the reply into ``sink`` and return the updated session.

        The assistant reply is added to the session only when the stream completes
        successfully; on error the session keeps the user message so the caller can resubmit.
        """
        content = text.strip()
        if not content:
            raise ValueError("message must not be blank")

        score = self._sentiment_scorer(content) if self._sentiment_scorer is not None else None
        user_message = ChatMessage(role="user", content=content, sentiment_score=score)
        session = session.with_message(user_message)
        if score is not None:
            session = session.with_mood(MoodPoint(timestamp=user_message.created_at, score=score))

        recorder = _ReplyRecorder(sink)
        try:
            async with self._transport.open(session.history_payload()) as response:
                decoder = StreamDecoder(max_buffer_chars=self._max_buffer_chars)
                await dispatch(decode_response(response, decoder), recorder)
        except TransportError as exc:
            logger.warning("chat transport failed", extra={"status_code": exc.status_code})
            recorder.on_error(exc.message)

        outcome = recorder.outcome or Done()
        reply = "".join(recorder.chunks).strip()
        if isinstance(outcome, Done):
            if reply:
                session = session.with_message(ChatMessage(role="assistant", content=reply))
            logger.info("chat turn complete", extra={"reply_chars": len(reply)})
        else:
            logger.warning("chat turn failed", extra={"error_message": outcome.message})

        return ChatTurn(session=session, outcome=outcome, reply=reply)
