from __future__ import annotations

import pytest

from alignment_demo.schemas import Asset
from alignment_demo.services.exceptions import WordNotFoundError
from alignment_demo.services.highlighter import LyricHighlighter
from alignment_demo.services.normalizer import normalize_alignment
from alignment_demo.services.player import MediaKind, MediaPlayer

ALIGNMENT = {
    "lines": [
        {
            "words": [
                {"text": "hello", "start": 0.0, "end": 1.0},
                {"text": "world", "start": 1.0, "end": 2.0},
            ]
        },
        {"words": [{"text": "again", "start": 2.5, "end": 3.0}]},
    ]
}


@pytest.fixture()
def player() -> MediaPlayer:
    player = MediaPlayer()
    player.load(Asset(src="https://cdn.test/song.mp3"))
    return player


@pytest.fixture()
def highlighter(player: MediaPlayer) -> LyricHighlighter:
    highlighter = LyricHighlighter(media=player)
    highlighter.render(normalize_alignment(ALIGNMENT))
    player.on_time_update(highlighter.update)
    return highlighter


@pytest.mark.parametrize(
    ("current_time", "expected"),
    [
        (0.5, [0]),
        (1.0, [0, 1]),
        (2.2, []),
        (3.0, [2]),
        (3.01, []),
    ],
)
def test_active_words_follow_the_clock(
    player: MediaPlayer, highlighter: LyricHighlighter, current_time: float, expected
) -> None:
    player.advance(current_time)

    assert highlighter.active_indexes == expected


def test_active_words_are_scrolled_into_view(highlighter: LyricHighlighter) -> None:
    scrolled = []
    highlighter.scroll_into_view = lambda word: scrolled.append(word.text)

    highlighter.update(1.0)

    assert scrolled == ["hello", "world"]


def test_render_resets_highlight(highlighter: LyricHighlighter) -> None:
    highlighter.update(0.5)
    highlighter.render(normalize_alignment({"words": [{"text": "x", "start": 9, "end": 10}]}))

    assert highlighter.active_indexes == []
    assert [word.text for word in highlighter.words] == ["x"]


def test_seek_moves_media_to_word_start(
    player: MediaPlayer, highlighter: LyricHighlighter
) -> None:
    assert highlighter.seek(2) is True
    assert player.current_time == 2.5


def test_seek_without_media_is_a_no_op() -> None:
    highlighter = LyricHighlighter()
    highlighter.render(normalize_alignment(ALIGNMENT))

    assert highlighter.seek(0) is False


def test_seek_unknown_word(highlighter: LyricHighlighter) -> None:
    with pytest.raises(WordNotFoundError):
        highlighter.seek(3)


def test_player_kind_follows_format() -> None:
    player = MediaPlayer()

    assert player.load(Asset(src="https://cdn.test/a.mp4", format="video/mp4")) is MediaKind.VIDEO
    player.advance(12.0)
    assert player.load(Asset(src="https://cdn.test/a.mp3")) is MediaKind.AUDIO
    assert player.current_time == 0.0
