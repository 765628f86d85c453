"""Turn alignment artifacts of any known shape into lines of timed words."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AlignmentWord:
    """Single timed word. ``start <= end`` is expected, not enforced."""

    text: str
    start: float
    end: float
    index: int

    def contains(self, current_time: float) -> bool:
        return self.start <= current_time <= self.end


@dataclass(slots=True)
class AlignmentLine:
    words: list[AlignmentWord] = field(default_factory=list)


@dataclass(slots=True)
class AlignmentDocument:
    """Normalized artifact. Empty when the shape was not recognized."""

    lines: list[AlignmentLine] = field(default_factory=list)
    total_words: int = 0
    source_line_count: int = 0

    @property
    def recognized(self) -> bool:
        """False when no known shape matched the artifact."""
        return self.source_line_count > 0

    def words(self) -> list[AlignmentWord]:
        return [word for line in self.lines for word in line.words]


def _present(data: Mapping[str, Any], key: str) -> bool:
    return data.get(key) is not None


def _first_truthy(word: Mapping[str, Any], *keys: str) -> Any:
    # Falls through on falsy values, so start=0 defers to startTime
    for key in keys:
        value = word.get(key)
        if value:
            return value
    return None


def _raw_lines(data: Any) -> list[Any]:
    if isinstance(data, Mapping):
        if _present(data, "lines"):
            lines = data["lines"]
        elif _present(data, "words"):
            lines = [{"words": data["words"]}]
        elif _present(data, "segments"):
            lines = data["segments"]
        else:
            return []
    elif isinstance(data, list):
        lines = [{"words": data}]
    else:
        return []
    return lines if isinstance(lines, list) else []


def _to_seconds(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_word(raw: Any, index: int) -> AlignmentWord:
    if not isinstance(raw, Mapping):
        raw = {}
    text = _first_truthy(raw, "text", "word") or ""
    start = _first_truthy(raw, "start", "startTime") or 0
    end = _first_truthy(raw, "end", "endTime") or 0
    return AlignmentWord(
        text=str(text).strip(),
        start=_to_seconds(start),
        end=_to_seconds(end),
        index=index,
    )


def normalize_alignment(data: Any) -> AlignmentDocument:
    """Extract lines of words from an alignment artifact.

    Resolution order, first match wins: ``lines``, ``words`` (one
    synthesized line), ``segments`` (one line per segment), a bare array
    of words. Anything else gives an empty document; callers report that
    as a parse failure.
    """
    raw_lines = _raw_lines(data)
    document = AlignmentDocument(source_line_count=len(raw_lines))

    for raw_line in raw_lines:
        raw_words = raw_line.get("words") if isinstance(raw_line, Mapping) else None
        if not raw_words or not isinstance(raw_words, list):
            continue

        line = AlignmentLine()
        for raw_word in raw_words:
            line.words.append(_to_word(raw_word, document.total_words))
            document.total_words += 1
        document.lines.append(line)

    logger.debug(
        "Alignment normalized",
        extra={
            "context": {
                "lines": len(document.lines),
                "source_lines": document.source_line_count,
                "words": document.total_words,
            }
        },
    )
    return document


def describe_structure(data: Any) -> list[str]:
    """Top-level keys of an artifact, for diagnostics."""
    if isinstance(data, Mapping):
        return [str(key) for key in data.keys()]
    if isinstance(data, list):
        return ["<list>"]
    return [type(data).__name__]
