"""State of the single UI session served by the console."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from .core.config import Settings
from .schemas import Asset
from .services.audioshake_client import AudioShakeClient, KeyEvent
from .services.catalog import AssetCatalog
from .services.diagnostics import DiagnosticsConsole
from .services.highlighter import LyricHighlighter
from .services.key_store import IKeyStore
from .services.normalizer import AlignmentWord
from .services.player import MediaKind, MediaPlayer
from .services.poller import PollHandle, TaskPoller

logger = logging.getLogger(__name__)


@dataclass
class DemoSession:
    settings: Settings
    client: AudioShakeClient
    poller: TaskPoller
    catalog: AssetCatalog
    player: MediaPlayer
    highlighter: LyricHighlighter
    diagnostics: DiagnosticsConsole
    authorized: bool = False
    scroll_target: Optional[int] = None
    poll: Optional[PollHandle] = None
    alignment_job: Optional[asyncio.Task] = field(default=None, repr=False)

    def load_media(self, asset: Asset) -> MediaKind:
        kind = self.player.load(asset)
        self.highlighter.media = self.player
        return kind

    @property
    def polling(self) -> bool:
        return self.poll is not None and not self.poll.done

    def _on_time_update(self, current_time: float) -> None:
        if not self.player.loaded:
            return
        self.scroll_target = None
        self.highlighter.update(current_time)

    def _on_scroll(self, word: AlignmentWord) -> None:
        self.scroll_target = word.index

    def _set_authorized(self, key: Optional[str]) -> None:
        self.authorized = bool(key)

    async def start(self) -> None:
        """Load the stored key; the key events keep ``authorized`` current."""
        await self.client.load_stored_key()
        self.authorized = self.client.has_api_key()

    async def close(self) -> None:
        if self.poll is not None:
            self.poll.cancel()
        if self.alignment_job is not None and not self.alignment_job.done():
            self.alignment_job.cancel()
            try:
                await self.alignment_job
            except asyncio.CancelledError:
                pass


def build_session(
    settings: Settings,
    key_store: IKeyStore,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DemoSession:
    """Wire the client, poller, catalog, player and highlighter together.

    The returned session's client still has to be entered as an async
    context manager before it can make requests.
    """
    client = AudioShakeClient(
        key_store,
        base_url=settings.base_url,
        timeout=settings.audioshake_timeout,
        key_name=settings.credential_key_name,
        transport=transport,
    )
    player = MediaPlayer()
    session = DemoSession(
        settings=settings,
        client=client,
        poller=TaskPoller(
            client,
            max_attempts=settings.poll_max_attempts,
            interval=settings.poll_interval_seconds,
        ),
        catalog=AssetCatalog(),
        player=player,
        highlighter=LyricHighlighter(),
        diagnostics=DiagnosticsConsole(limit=settings.diagnostics_limit),
    )
    session.highlighter.scroll_into_view = session._on_scroll
    player.on_time_update(session._on_time_update)

    client.subscribe(KeyEvent.LOADED, session._set_authorized)
    client.subscribe(KeyEvent.UPDATED, session._set_authorized)
    client.subscribe(KeyEvent.CLEARED, session._set_authorized)
    return session
