"""API key endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...core.handlers import get_responses_for_exceptions
from ...dependencies import SessionDep
from ...schemas import ApiKeyRequest, ApiKeyStatus, ApiKeyValidation
from ...services.exceptions import AuthError
from ... import workflows

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/key", response_model=ApiKeyStatus)
async def get_key_status(session: SessionDep) -> ApiKeyStatus:
    return ApiKeyStatus(authorized=session.authorized)


@router.put(
    "/key",
    response_model=ApiKeyStatus,
    responses=get_responses_for_exceptions(with_validation_error=True),
)
async def save_key(payload: ApiKeyRequest, session: SessionDep) -> ApiKeyStatus:
    await workflows.save_api_key(session, payload.api_key)
    return ApiKeyStatus(authorized=session.authorized)


@router.delete("/key", response_model=ApiKeyStatus, status_code=status.HTTP_200_OK)
async def clear_key(session: SessionDep) -> ApiKeyStatus:
    await workflows.clear_api_key(session)
    return ApiKeyStatus(authorized=session.authorized)


@router.post(
    "/key/validate",
    response_model=ApiKeyValidation,
    responses=get_responses_for_exceptions(AuthError),
)
async def validate_key(session: SessionDep) -> ApiKeyValidation:
    if not session.client.has_api_key():
        raise AuthError()
    return ApiKeyValidation(valid=await session.client.validate_key())
