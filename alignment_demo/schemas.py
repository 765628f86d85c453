"""Pydantic schemas for assets and the console API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints


class Asset(BaseModel):
    """Media asset known to the catalog. Only ``src`` ever leaves the client."""

    model_config = ConfigDict(extra="allow")

    src: str = Field(..., min_length=1)
    title: str = "Untitled"
    format: str = "audio/mpeg"
    expiry: str | None = None


class AssetOut(Asset):
    index: int
    label: str
    selected: bool = False


class AssetListResponse(BaseModel):
    count: int
    selected_index: int | None
    assets: list[AssetOut]


class ApiKeyRequest(BaseModel):
    api_key: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ApiKeyStatus(BaseModel):
    authorized: bool


class ApiKeyValidation(BaseModel):
    valid: bool


class AssetsFromUrlRequest(BaseModel):
    url: str = Field(..., min_length=1)


class AssetFromSourceRequest(BaseModel):
    source_url: str = Field(..., min_length=1)
    title: str | None = None


class AlignmentOut(BaseModel):
    """One row of the alignments list."""

    index: int
    id: str
    status: str | None
    source: str
    created_at: str | None
    error: str | None = None
    selectable: bool
    visible: bool = True


class AlignmentListResponse(BaseModel):
    alignments: list[AlignmentOut]
    filter: str = ""


class PollStatusResponse(BaseModel):
    task_id: str | None
    state: str | None
    error: str | None = None


class CreateAlignmentResponse(BaseModel):
    task: dict[str, Any]
    poll: PollStatusResponse


class WordOut(BaseModel):
    index: int
    text: str
    start: float
    end: float
    active: bool


class LineOut(BaseModel):
    words: list[WordOut]


class PlayerResponse(BaseModel):
    src: str | None
    title: str | None
    kind: str | None
    current_time: float
    total_words: int
    lines: list[LineOut]
    active: list[int]
    scroll_to: int | None = None


class TimeUpdateRequest(BaseModel):
    current_time: float = Field(..., ge=0.0)


class TimeUpdateResponse(BaseModel):
    current_time: float
    active: list[int]
    scroll_to: int | None = None


class SeekResponse(BaseModel):
    seeked: bool
    current_time: float


class ConsoleMethodRequest(BaseModel):
    task_id: str | None = None
    name: str = "usage"


class DiagnosticEntryOut(BaseModel):
    timestamp: datetime
    level: str
    payload: Any


class ConsoleResponse(BaseModel):
    status: str | None
    entries: list[DiagnosticEntryOut]
