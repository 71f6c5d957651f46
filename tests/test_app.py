"""Tests for application wiring."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from agentid.app import AppComponents, build_components, create_app
from agentid.config import AppConfig
from agentid.provider.client import GrandIDClient
from agentid.security.rate_limiter import PollRateTracker
from agentid.sessions.store import MemorySessionStore


class TestBuildComponents:
    """Tests for build_components."""

    def test_defaults_to_memory_store(self):
        """Without redis_url the single-process store is used."""
        components = build_components(AppConfig())

        assert isinstance(components.store, MemorySessionStore)
        assert isinstance(components.provider, GrandIDClient)
        assert isinstance(components.rate_tracker, PollRateTracker)
        assert components.store.terminal_ttl_seconds == 3600

    def test_rate_tracker_disabled(self, app_config):
        """A zero poll interval builds no tracker."""
        components = build_components(app_config)

        assert components.rate_tracker is None


class TestAppComponents:
    """Tests for AppComponents.aclose."""

    async def test_aclose_closes_provider_then_store(self):
        """Both network resources are released."""
        provider = MagicMock()
        provider.aclose = AsyncMock()
        store = MagicMock()
        store.close = AsyncMock()
        components = AppComponents(
            store=store,
            provider=provider,
            issuer=MagicMock(),
            auth_logger=MagicMock(),
            machine=MagicMock(),
        )

        await components.aclose()

        provider.aclose.assert_awaited_once()
        store.close.assert_awaited_once()

    async def test_store_closed_even_if_provider_close_fails(self):
        """A failing provider close still releases the store."""
        provider = MagicMock()
        provider.aclose = AsyncMock(side_effect=RuntimeError("boom"))
        store = MagicMock()
        store.close = AsyncMock()
        components = AppComponents(
            store=store,
            provider=provider,
            issuer=MagicMock(),
            auth_logger=MagicMock(),
            machine=MagicMock(),
        )

        with pytest.raises(RuntimeError):
            await components.aclose()

        store.close.assert_awaited_once()


class TestCreateApp:
    """Tests for the uvicorn factory."""

    def test_serves_health(self, app_config):
        """The factory returns a working app; the lifespan closes components."""
        with TestClient(create_app(app_config)) as client:
            response = client.get("/health")

        assert response.status_code == 200
