"""Shared fixtures for serenity tests."""

from __future__ import annotations

import pytest

from serenity.core.settings import Settings
from tests.helpers import RecordingSink


@pytest.fixture
def test_settings() -> Settings:
    return Settings(AI_GATEWAY_API_KEY="gateway-key", CLIENT_API_KEY="client-key")


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()
