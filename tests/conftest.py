from __future__ import annotations

from contextlib import AsyncExitStack
from typing import Callable, Optional

import httpx
import pytest

from alignment_demo.core.config import Settings
from alignment_demo.services.audioshake_client import AudioShakeClient
from alignment_demo.services.key_store import InMemoryKeyStore
from alignment_demo.session import DemoSession, build_session

from tests.helpers import BASE_URL, FakeProvider

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        audioshake_base_url=BASE_URL,
        poll_max_attempts=3,
        poll_interval_seconds=0.0,
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture()
def key_store() -> InMemoryKeyStore:
    return InMemoryKeyStore()


@pytest.fixture()
async def make_client(key_store: InMemoryKeyStore):
    """Build entered clients backed by an ``httpx.MockTransport``."""
    async with AsyncExitStack() as stack:

        async def factory(
            handler: Handler, api_key: Optional[str] = "test-key"
        ) -> AudioShakeClient:
            client = AudioShakeClient(
                key_store,
                base_url=BASE_URL,
                transport=httpx.MockTransport(handler),
            )
            await stack.enter_async_context(client)
            if api_key:
                await client.set_api_key(api_key)
            return client

        yield factory


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
async def demo_session(settings: Settings, key_store: InMemoryKeyStore, provider: FakeProvider):
    session = build_session(settings, key_store, transport=httpx.MockTransport(provider))
    async with session.client:
        await session.start()
        try:
            yield session
        finally:
            await session.close()


@pytest.fixture()
async def authorized_session(demo_session: DemoSession) -> DemoSession:
    await demo_session.client.set_api_key("test-key")
    return demo_session
