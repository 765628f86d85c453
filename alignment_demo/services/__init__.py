"""Service layer: provider client, poller, catalog and lyric rendering."""

from .audioshake_client import AudioShakeClient, IAudioShakeClient, KeyEvent
from .catalog import AssetCatalog
from .diagnostics import DiagnosticsConsole, EntryLevel
from .highlighter import LyricHighlighter
from .key_store import IKeyStore, InMemoryKeyStore, SqlKeyStore
from .normalizer import AlignmentDocument, normalize_alignment
from .player import MediaPlayer
from .poller import PollHandle, PollState, TaskPoller

__all__ = [
    "AlignmentDocument",
    "AssetCatalog",
    "AudioShakeClient",
    "DiagnosticsConsole",
    "EntryLevel",
    "IAudioShakeClient",
    "IKeyStore",
    "InMemoryKeyStore",
    "KeyEvent",
    "LyricHighlighter",
    "MediaPlayer",
    "PollHandle",
    "PollState",
    "SqlKeyStore",
    "TaskPoller",
    "normalize_alignment",
]
