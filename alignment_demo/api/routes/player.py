"""Media player and lyric highlighting endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from ...core.handlers import get_responses_for_exceptions
from ...dependencies import SessionDep
from ...schemas import (
    LineOut,
    PlayerResponse,
    SeekResponse,
    TimeUpdateRequest,
    TimeUpdateResponse,
    WordOut,
)
from ...services.exceptions import WordNotFoundError
from ...session import DemoSession

router = APIRouter(prefix="/player", tags=["player"])


def player_state(session: DemoSession) -> PlayerResponse:
    player = session.player
    highlighter = session.highlighter
    lines = [
        LineOut(
            words=[
                WordOut(
                    index=word.index,
                    text=word.text,
                    start=word.start,
                    end=word.end,
                    active=highlighter.is_active(word.index),
                )
                for word in line.words
            ]
        )
        for line in highlighter.document.lines
    ]
    return PlayerResponse(
        src=player.asset.src if player.asset else None,
        title=player.asset.title if player.asset else None,
        kind=player.kind.value if player.kind else None,
        current_time=player.current_time,
        total_words=highlighter.document.total_words,
        lines=lines,
        active=highlighter.active_indexes,
        scroll_to=session.scroll_target,
    )


@router.get("", response_model=PlayerResponse)
async def get_player(session: SessionDep) -> PlayerResponse:
    return player_state(session)


@router.post(
    "/time",
    response_model=TimeUpdateResponse,
    responses=get_responses_for_exceptions(with_validation_error=True),
)
async def update_time(payload: TimeUpdateRequest, session: SessionDep) -> TimeUpdateResponse:
    """Time update sent by the playing media element."""
    session.player.advance(payload.current_time)
    return TimeUpdateResponse(
        current_time=session.player.current_time,
        active=session.highlighter.active_indexes,
        scroll_to=session.scroll_target,
    )


@router.post(
    "/words/{index}/seek",
    response_model=SeekResponse,
    responses=get_responses_for_exceptions(WordNotFoundError),
)
async def seek_to_word(index: int, session: SessionDep) -> SeekResponse:
    seeked = session.highlighter.seek(index)
    if seeked:
        session.player.advance(session.player.current_time)
    return SeekResponse(seeked=seeked, current_time=session.player.current_time)
