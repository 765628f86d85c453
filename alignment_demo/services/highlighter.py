"""Time-synchronized word highlighting."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .exceptions import WordNotFoundError
from .normalizer import AlignmentDocument, AlignmentWord
from .player import MediaElement

logger = logging.getLogger(__name__)

ScrollRequest = Callable[[AlignmentWord], None]


class LyricHighlighter:
    """Marks the words whose ``[start, end]`` range holds the playback time.

    Every word is tested on its own, so overlapping ranges or a shared
    boundary (one word ending at 1.0, the next starting at 1.0) leave more
    than one word active at once.
    """

    def __init__(
        self,
        media: Optional[MediaElement] = None,
        scroll_into_view: Optional[ScrollRequest] = None,
    ) -> None:
        self.media = media
        self.scroll_into_view = scroll_into_view
        self.document = AlignmentDocument()
        self._words: list[AlignmentWord] = []
        self._active: set[int] = set()

    def render(self, document: AlignmentDocument) -> None:
        self.document = document
        self._words = document.words()
        self._active = set()

    def clear(self) -> None:
        self.render(AlignmentDocument())

    @property
    def words(self) -> list[AlignmentWord]:
        return list(self._words)

    @property
    def active_indexes(self) -> list[int]:
        return sorted(self._active)

    def is_active(self, index: int) -> bool:
        return index in self._active

    def update(self, current_time: float) -> list[AlignmentWord]:
        active: list[AlignmentWord] = []
        for word in self._words:
            if word.contains(current_time):
                active.append(word)
                if self.scroll_into_view:
                    self.scroll_into_view(word)
        self._active = {word.index for word in active}
        return active

    def seek(self, index: int) -> bool:
        """Move the media to the start of word ``index``."""
        if self.media is None:
            return False
        word = self._word_at(index)
        self.media.current_time = word.start
        logger.debug("Seek to word", extra={"context": {"index": index, "start": word.start}})
        return True

    def _word_at(self, index: int) -> AlignmentWord:
        if index < 0 or index >= len(self._words):
            raise WordNotFoundError(details={"index": index})
        return self._words[index]
