from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx
from pydantic import ValidationError

from serenity.api.schemas.journal import DriftAnalysis, JournalEntry

logger = logging.getLogger(__name__)


class DriftAnalysisError(Exception):
    """The analyze-journal endpoint did not return a usable analysis."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DriftAnalysisClient:
    """Calls the remote analyze-journal function and returns a typed analysis."""

    def __init__(
        self,
        endpoint_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def analyze(self, entries: Sequence[JournalEntry]) -> DriftAnalysis:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        payload = {
            "entries": [{"content": entry.content, "created_at": entry.created_at.isoformat()} for entry in entries]
        }

        try:
            response = await self._client.post(self._endpoint_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise DriftAnalysisError(f"Analysis request failed: {exc}") from exc

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = {}
            error = body.get("error") if isinstance(body, dict) else None
            message = error if isinstance(error, str) and error else f"Failed ({response.status_code})"
            logger.warning("drift analysis failed", extra={"status_code": response.status_code})
            raise DriftAnalysisError(message, status_code=response.status_code)

        try:
            return DriftAnalysis.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DriftAnalysisError("Malformed analysis response", status_code=response.status_code) from exc
