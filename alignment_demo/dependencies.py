"""Dependency wiring for FastAPI application."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from .session import DemoSession


async def get_session(request: Request) -> DemoSession:
    return request.app.state.demo_session


SessionDep = Annotated[DemoSession, Depends(get_session)]


__all__ = [
    "SessionDep",
    "get_session",
]
