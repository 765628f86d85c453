"""Alignment task endpoints."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Query, status

from ...core.handlers import get_responses_for_exceptions
from ...dependencies import SessionDep
from ...schemas import (
    AlignmentListResponse,
    AlignmentOut,
    CreateAlignmentResponse,
    PlayerResponse,
    PollStatusResponse,
)
from ...services.audioshake_models import Task
from ...services.catalog import source_filename
from ...services.exceptions import (
    AlignmentInProgressError,
    AlignmentUnavailableError,
    APIError,
    AssetNotSelectedError,
    AuthError,
    FetchError,
    NetworkError,
    ParseError,
)
from ...session import DemoSession
from ... import workflows
from .player import player_state

router = APIRouter(prefix="/alignments", tags=["alignments"])


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _alignment_out(session: DemoSession, index: int, task: Task) -> AlignmentOut:
    target = task.alignment_target()
    filename = source_filename(target) if target else ""
    return AlignmentOut(
        index=index,
        id=task.id,
        status=target.status if target else None,
        source=f"Source: {filename or 'Unknown'}",
        created_at=_as_text(task.created_at),
        error=_as_text(target.error) if target else None,
        selectable=bool(target and target.is_completed),
        visible=session.catalog.matches_filter(task),
    )


def _poll_status(session: DemoSession) -> PollStatusResponse:
    handle = session.poll
    if handle is None:
        return PollStatusResponse(task_id=None, state=None)
    return PollStatusResponse(
        task_id=handle.task_id,
        state=handle.state.value,
        error=str(handle.error) if handle.error else None,
    )


@router.get("", response_model=AlignmentListResponse)
async def list_alignments(
    session: SessionDep,
    filter: Optional[str] = None,
    refresh: bool = False,
    skip: int = Query(0, ge=0),
    take: Optional[int] = Query(None, ge=1),
) -> AlignmentListResponse:
    if refresh:
        await workflows.load_alignments(session, skip=skip, take=take)
    if filter is not None:
        session.catalog.filter_alignments(filter)
    return AlignmentListResponse(
        alignments=[
            _alignment_out(session, index, task)
            for index, task in enumerate(session.catalog.alignments)
        ],
        filter=session.catalog.filter_text,
    )


@router.post(
    "",
    response_model=CreateAlignmentResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses=get_responses_for_exceptions(
        AuthError,
        AssetNotSelectedError,
        AlignmentInProgressError,
        APIError,
        NetworkError,
    ),
)
async def create_alignment(session: SessionDep) -> CreateAlignmentResponse:
    task = await workflows.create_alignment(session)
    return CreateAlignmentResponse(task=task.to_wire(), poll=_poll_status(session))


@router.get("/poll", response_model=PollStatusResponse)
async def get_poll_status(session: SessionDep) -> PollStatusResponse:
    return _poll_status(session)


@router.delete("/poll", response_model=PollStatusResponse)
async def cancel_poll(session: SessionDep) -> PollStatusResponse:
    await workflows.cancel_alignment(session)
    return _poll_status(session)


@router.post(
    "/{index}/select",
    response_model=PlayerResponse,
    responses=get_responses_for_exceptions(
        AlignmentUnavailableError, FetchError, ParseError
    ),
)
async def select_alignment(index: int, session: SessionDep) -> PlayerResponse:
    await workflows.select_alignment(session, index)
    return player_state(session)
