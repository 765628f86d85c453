"""Virtual media element that drives the lyric clock."""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional, Protocol

from ..schemas import Asset

logger = logging.getLogger(__name__)

TimeUpdateListener = Callable[[float], None]


class MediaElement(Protocol):
    """What the highlighter needs from a media element."""

    current_time: float


class MediaKind(str, enum.Enum):
    VIDEO = "video"
    AUDIO = "audio"


class MediaPlayer:
    """Holds the loaded media source and the playback position.

    The position only moves through ``advance`` (the periodic time update
    sent by the real player) or through a seek that sets ``current_time``.
    """

    def __init__(self) -> None:
        self.asset: Optional[Asset] = None
        self.kind: Optional[MediaKind] = None
        self.current_time: float = 0.0
        self._listeners: list[TimeUpdateListener] = []

    @property
    def loaded(self) -> bool:
        return self.asset is not None

    def load(self, asset: Asset) -> MediaKind:
        self.asset = asset
        self.kind = MediaKind.VIDEO if "video" in asset.format else MediaKind.AUDIO
        self.current_time = 0.0
        logger.info(
            "Media loaded",
            extra={"context": {"src": asset.src, "kind": self.kind.value}},
        )
        return self.kind

    def on_time_update(self, listener: TimeUpdateListener) -> None:
        self._listeners.append(listener)

    def advance(self, current_time: float) -> None:
        """Record a time update from the playing media and notify listeners."""
        self.current_time = current_time
        for listener in list(self._listeners):
            listener(current_time)
