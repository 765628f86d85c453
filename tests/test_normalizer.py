from __future__ import annotations

import pytest

from alignment_demo.services.normalizer import (
    AlignmentWord,
    describe_structure,
    normalize_alignment,
)


def test_lines_are_used_directly() -> None:
    document = normalize_alignment(
        {"lines": [{"words": [{"text": "hi", "start": 0, "end": 1}]}]}
    )

    assert len(document.lines) == 1
    assert document.lines[0].words == [AlignmentWord(text="hi", start=0.0, end=1.0, index=0)]
    assert document.total_words == 1


def test_words_are_wrapped_into_one_line() -> None:
    document = normalize_alignment({"words": [{"word": "x", "startTime": 2, "endTime": 3}]})

    assert len(document.lines) == 1
    word = document.lines[0].words[0]
    assert (word.text, word.start, word.end) == ("x", 2.0, 3.0)


def test_segments_become_lines() -> None:
    document = normalize_alignment(
        {
            "segments": [
                {"words": [{"text": "one", "start": 0.1, "end": 0.4}]},
                {"words": [{"text": "two", "start": 0.5, "end": 0.9}]},
            ]
        }
    )

    assert [[w.text for w in line.words] for line in document.lines] == [["one"], ["two"]]
    assert [word.index for word in document.words()] == [0, 1]


def test_bare_list_is_one_line_of_words() -> None:
    document = normalize_alignment(
        [{"text": " a ", "start": 1, "end": 2}, {"text": "b", "start": 2, "end": 3}]
    )

    assert len(document.lines) == 1
    assert [w.text for w in document.lines[0].words] == ["a", "b"]


def test_lines_take_precedence_over_words() -> None:
    document = normalize_alignment(
        {
            "lines": [{"words": [{"text": "line"}]}],
            "words": [{"text": "ignored"}],
        }
    )

    assert [w.text for w in document.lines[0].words] == ["line"]


def test_lines_without_words_are_skipped() -> None:
    document = normalize_alignment(
        {
            "lines": [
                {"words": []},
                {"text": "no words key"},
                {"words": [{"text": "kept", "start": 4, "end": 5}]},
            ]
        }
    )

    assert len(document.lines) == 1
    assert document.lines[0].words[0].index == 0
    assert document.recognized


def test_zero_falls_through_to_alternate_key() -> None:
    word = normalize_alignment(
        {"words": [{"text": "", "word": "alt", "start": 0, "startTime": 1.5, "end": 2}]}
    ).words()[0]

    assert word.text == "alt"
    assert word.start == 1.5


def test_missing_fields_default() -> None:
    word = normalize_alignment({"words": [{}]}).words()[0]

    assert (word.text, word.start, word.end) == ("", 0.0, 0.0)


@pytest.mark.parametrize("data", [{}, {"foo": 1}, "text", 42, None, {"lines": None}])
def test_unrecognized_input_gives_empty_document(data) -> None:
    document = normalize_alignment(data)

    assert document.lines == []
    assert document.total_words == 0
    assert not document.recognized


def test_describe_structure() -> None:
    assert describe_structure({"lines": [], "meta": {}}) == ["lines", "meta"]
    assert describe_structure([]) == ["<list>"]
