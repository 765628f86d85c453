"""Asset list endpoints."""

from __future__ import annotations

from fastapi import APIRouter, UploadFile

from ...core.handlers import get_responses_for_exceptions
from ...dependencies import SessionDep
from ...schemas import (
    AssetFromSourceRequest,
    AssetListResponse,
    AssetOut,
    AssetsFromUrlRequest,
)
from ...services.catalog import format_label
from ...services.exceptions import AssetLoadError, AssetNotFoundError
from ...session import DemoSession
from ... import workflows

router = APIRouter(prefix="/assets", tags=["assets"])


def _asset_list(session: DemoSession) -> AssetListResponse:
    catalog = session.catalog
    return AssetListResponse(
        count=len(catalog.assets),
        selected_index=catalog.selected_index,
        assets=[
            AssetOut.model_validate(
                {
                    **asset.model_dump(),
                    "index": index,
                    "label": format_label(asset.format),
                    "selected": index == catalog.selected_index,
                }
            )
            for index, asset in enumerate(catalog.assets)
        ],
    )


@router.get("", response_model=AssetListResponse)
async def list_assets(session: SessionDep) -> AssetListResponse:
    return _asset_list(session)


@router.post("/demo", response_model=AssetListResponse)
async def load_demo_assets(session: SessionDep) -> AssetListResponse:
    workflows.load_demo_assets(session)
    return _asset_list(session)


@router.post(
    "/url",
    response_model=AssetListResponse,
    responses=get_responses_for_exceptions(AssetLoadError, with_validation_error=True),
)
async def load_assets_from_url(
    payload: AssetsFromUrlRequest, session: SessionDep
) -> AssetListResponse:
    await workflows.load_assets_from_url(session, payload.url)
    return _asset_list(session)


@router.post(
    "/file",
    response_model=AssetListResponse,
    responses=get_responses_for_exceptions(AssetLoadError),
)
async def load_assets_from_file(file: UploadFile, session: SessionDep) -> AssetListResponse:
    workflows.load_assets_file(session, await file.read(), filename=file.filename)
    return _asset_list(session)


@router.post(
    "/source",
    response_model=AssetListResponse,
    responses=get_responses_for_exceptions(with_validation_error=True),
)
async def add_asset_from_source(
    payload: AssetFromSourceRequest, session: SessionDep
) -> AssetListResponse:
    workflows.add_asset_from_source(session, payload.source_url, payload.title)
    return _asset_list(session)


@router.post(
    "/{index}/select",
    response_model=AssetListResponse,
    responses=get_responses_for_exceptions(AssetNotFoundError),
)
async def select_asset(index: int, session: SessionDep) -> AssetListResponse:
    await workflows.select_asset(session, index)
    return _asset_list(session)
