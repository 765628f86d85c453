"""Structured diagnostic entries and the transient status line."""

from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)


class EntryLevel(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True)
class DiagnosticEntry:
    timestamp: datetime
    level: EntryLevel
    payload: Any


class DiagnosticsConsole:
    """Bounded list of entries shown in the API console sidebar."""

    def __init__(self, limit: int = 500) -> None:
        self._entries: deque[DiagnosticEntry] = deque(maxlen=limit)
        self.status: Optional[str] = None

    def add(self, payload: Any, level: EntryLevel = EntryLevel.INFO) -> DiagnosticEntry:
        entry = DiagnosticEntry(
            timestamp=datetime.now(timezone.utc),
            level=EntryLevel(level),
            payload=payload,
        )
        self._entries.append(entry)
        log = logger.error if entry.level is EntryLevel.ERROR else logger.debug
        log("Diagnostic entry", extra={"context": {"level": entry.level.value, "payload": payload}})
        return entry

    def error(self, payload: Any) -> DiagnosticEntry:
        return self.add(payload, EntryLevel.ERROR)

    def notify(self, message: str) -> None:
        """Replace the status notification."""
        self.status = message
        logger.info(message)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> list[DiagnosticEntry]:
        return list(self._entries)
