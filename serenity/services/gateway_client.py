from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from serenity.api.schemas.journal import DriftAnalysis, JournalEntryInput
from serenity.core.settings import Settings

logger = logging.getLogger(__name__)

DRIFT_SYSTEM_PROMPT = """You are an emotional tone analyst. Given a sequence of journal entries, analyze emotional drift patterns.

You MUST respond using the analyze_drift tool.

Guidelines:
- Score sentiment 0.0 (very negative) to 1.0 (very positive) for each entry
- Identify the dominant emotion for each entry (e.g. "hopeful", "anxious", "neutral", "sad", "grateful", "angry", "calm")
- Detect overall drift direction: "improving", "declining", "stable", or "volatile"
- Write a 2-3 sentence insight summary about emotional patterns and shifts
- Be compassionate and constructive in your summary"""

ANALYZE_DRIFT_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "analyze_drift",
        "description": "Return structured emotional drift analysis",
        "parameters": {
            "type": "object",
            "properties": {
                "entry_scores": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "index": {"type": "number"},
                            "sentiment": {"type": "number"},
                            "emotion": {"type": "string"},
                        },
                        "required": ["index", "sentiment", "emotion"],
                        "additionalProperties": False,
                    },
                },
                "drift_direction": {
                    "type": "string",
                    "enum": ["improving", "declining", "stable", "volatile"],
                },
                "summary": {"type": "string"},
            },
            "required": ["entry_scores", "drift_direction", "summary"],
            "additionalProperties": False,
        },
    },
}


@dataclass
class GatewayError(Exception):
    status_code: int
    message: str


def format_entries(entries: Sequence[JournalEntryInput]) -> str:
    return "\n\n---\n\n".join(
        f"Entry {index} ({entry.created_at}):\n{entry.content}" for index, entry in enumerate(entries, start=1)
    )


def map_gateway_status(status_code: int, body: str = "") -> GatewayError:
    if status_code == 429:
        return GatewayError(status_code=429, message="Rate limit exceeded, try again later.")
    if status_code == 402:
        return GatewayError(status_code=402, message="AI credits exhausted.")
    logger.error("ai gateway error", extra={"status_code": status_code, "body": body[:500]})
    return GatewayError(status_code=500, message="AI service unavailable")


def _tool_call_arguments(payload: Any) -> str | None:
    try:
        arguments = payload["choices"][0]["message"]["tool_calls"][0]["function"]["arguments"]
    except (KeyError, IndexError, TypeError):
        return None
    return arguments if isinstance(arguments, str) and arguments else None


class GatewayClient:
    """httpx client for the LLM gateway's OpenAI-compatible chat completions endpoint."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.ai_gateway_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        if not self._settings.ai_gateway_api_key:
            raise GatewayError(status_code=500, message="AI gateway API key is not configured")
        return {
            "Authorization": f"Bearer {self._settings.ai_gateway_api_key}",
            "Content-Type": "application/json",
        }

    async def analyze_drift(self, entries: Sequence[JournalEntryInput]) -> DriftAnalysis:
        """Ask the gateway for a forced ``analyze_drift`` tool call over ``entries``."""
        headers = self._headers()
        payload = {
            "model": self._settings.drift_model,
            "messages": [
                {"role": "system", "content": DRIFT_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Analyze these journal entries for emotional drift:\n\n{format_entries(entries)}",
                },
            ],
            "tools": [ANALYZE_DRIFT_TOOL],
            "tool_choice": {"type": "function", "function": {"name": "analyze_drift"}},
        }

        try:
            response = await self._client.post(self._settings.ai_gateway_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("ai gateway request failed", extra={"error": str(exc)})
            raise GatewayError(status_code=500, message="AI service unavailable") from exc

        if not response.is_success:
            raise map_gateway_status(response.status_code, response.text)

        try:
            arguments = _tool_call_arguments(response.json())
        except ValueError:
            arguments = None
        if arguments is None:
            raise GatewayError(status_code=500, message="No analysis returned")

        try:
            analysis = DriftAnalysis.model_validate(json.loads(arguments))
        except (ValueError, ValidationError) as exc:
            logger.warning("ai gateway returned malformed analysis", extra={"error": str(exc)})
            raise GatewayError(status_code=500, message="Malformed analysis returned") from exc

        logger.info(
            "journal drift analyzed",
            extra={"entries": len(entries), "drift_direction": analysis.drift_direction},
        )
        return analysis

    async def open_chat_stream(self, messages: Sequence[Mapping[str, str]]) -> GatewayChatStream:
        """Start a streaming completion and return a handle on its raw event-stream body.

        Status errors are raised here, before the first byte is handed out. The caller
        owns the handle and must ``aclose`` it even if the body is never read.
        """
        headers = self._headers()
        payload = {
            "model": self._settings.chat_model,
            "messages": [
                {"role": "system", "content": self._settings.chat_system_prompt},
                *({"role": m["role"], "content": m["content"]} for m in messages),
            ],
            "stream": True,
        }
        request = self._client.build_request("POST", self._settings.ai_gateway_url, json=payload, headers=headers)

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            logger.warning("ai gateway stream request failed", extra={"error": str(exc)})
            raise GatewayError(status_code=500, message="AI service unavailable") from exc

        if not response.is_success:
            try:
                body = (await response.aread()).decode("utf-8", errors="replace")
            finally:
                await response.aclose()
            raise map_gateway_status(response.status_code, body)

        return GatewayChatStream(response)


class GatewayChatStream:
    """Open upstream chat completion response."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def closed(self) -> bool:
        return self._response.is_closed

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError:
            logger.warning("ai gateway stream interrupted", exc_info=True)
            raise
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if not self._response.is_closed:
            await self._response.aclose()
