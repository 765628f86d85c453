"""API console endpoints: raw provider calls and the diagnostics log."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter

from ...core.handlers import get_responses_for_exceptions
from ...core.responses import BaseDataResponse
from ...dependencies import SessionDep
from ...schemas import ConsoleMethodRequest, ConsoleResponse, DiagnosticEntryOut
from ...services.exceptions import (
    APIError,
    AssetNotSelectedError,
    AuthError,
    NetworkError,
    UnknownMethodError,
)
from ...session import DemoSession
from ... import workflows

router = APIRouter(prefix="/console", tags=["console"])


def _console_state(session: DemoSession) -> ConsoleResponse:
    diagnostics = session.diagnostics
    return ConsoleResponse(
        status=diagnostics.status,
        entries=[
            DiagnosticEntryOut(
                timestamp=entry.timestamp,
                level=entry.level.value,
                payload=entry.payload,
            )
            for entry in diagnostics.entries
        ],
    )


@router.get("/entries", response_model=ConsoleResponse)
async def list_entries(session: SessionDep) -> ConsoleResponse:
    return _console_state(session)


@router.delete("/entries", response_model=ConsoleResponse)
async def clear_entries(session: SessionDep) -> ConsoleResponse:
    session.diagnostics.clear()
    return _console_state(session)


@router.post(
    "/{method}",
    response_model=BaseDataResponse[Any],
    responses=get_responses_for_exceptions(
        AuthError, AssetNotSelectedError, UnknownMethodError, APIError, NetworkError
    ),
)
async def execute_method(
    method: str,
    session: SessionDep,
    payload: Optional[ConsoleMethodRequest] = None,
) -> BaseDataResponse[Any]:
    payload = payload or ConsoleMethodRequest()
    result = await workflows.execute_api_method(
        session, method, task_id=payload.task_id, name=payload.name
    )
    return BaseDataResponse(data=result)
