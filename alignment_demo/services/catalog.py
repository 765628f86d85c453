"""Loaded assets and known alignment tasks of the UI session."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional
from urllib.parse import urlsplit

from pydantic import ValidationError

from ..schemas import Asset
from .audioshake_models import Target, Task
from .exceptions import (
    AlignmentUnavailableError,
    AssetLoadError,
    AssetNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "audio/mpeg"

MIME_BY_EXTENSION = {
    "mp3": "audio/mpeg",
    "mp4": "video/mp4",
    "wav": "audio/wav",
    "flac": "audio/flac",
    "mov": "video/quicktime",
    "aac": "audio/aac",
}

DEMO_ASSETS: list[dict[str, str]] = [
    {
        "src": "https://audioshake.s3.us-east-1.amazonaws.com/demo-assets/surfing.mp4",
        "title": "surfing.mp4",
        "format": "video/mp4",
    },
    {
        "src": "https://spatial-explorer.s3.us-east-1.amazonaws.com/spatial-Tech-Startups-DisneyAccelerator-Demo-Day-2024.mp4",
        "title": "DisneyAccelerator-Demo-Day-2024.mp4",
        "format": "video/mp4",
    },
]


def infer_mime_type(source_url: str) -> str:
    """MIME type from the file extension of a URL, ignoring query and fragment."""
    cleaned = source_url.split("?")[0].split("#")[0]
    file_name = cleaned.split("/")[-1]
    extension = file_name.split(".")[-1].lower()
    if extension not in MIME_BY_EXTENSION:
        logger.warning(
            f"Unsupported file type: {extension}. Defaulting to '{DEFAULT_MIME_TYPE}'."
        )
        return DEFAULT_MIME_TYPE
    return MIME_BY_EXTENSION[extension]


def format_label(media_format: str) -> str:
    if "video" in media_format:
        return "Video"
    if "audio" in media_format:
        return "Audio"
    if "json" in media_format:
        return "JSON"
    return "File"


def source_filename(target: Target) -> str:
    """Last path segment of the target URL, without the query string."""
    path = urlsplit(target.url or "").path
    return path.split("/")[-1]


def assets_from_payload(data: Any) -> list[Asset]:
    """Accept ``{"assets": [...]}`` as well as a bare list of assets."""
    if isinstance(data, dict) and data.get("assets"):
        data = data["assets"]
    if not isinstance(data, list):
        raise AssetLoadError(
            message="Error loading assets: expected a list of assets",
            details={"received": type(data).__name__},
        )
    try:
        return [Asset.model_validate(item) for item in data]
    except ValidationError as e:
        raise AssetLoadError(
            message=f"Error loading assets: {e.error_count()} invalid field(s)",
            details={"validation_errors": e.errors(include_url=False, include_context=False)},
        ) from e


def asset_from_source(source_url: str, title: Optional[str] = None) -> Asset:
    source_url = source_url.strip()
    asset = Asset(
        src=source_url,
        title=title or "Untitled",
        format=infer_mime_type(source_url),
    )
    logger.info(
        f"Asset created with URL: {asset.src}, Title: {asset.title}, MIME Type: {asset.format}"
    )
    return asset


@dataclass(slots=True)
class AlignmentSelection:
    """What selecting a completed alignment resolves to."""

    task: Task
    target: Target
    link: str
    fallback_media: Optional[Asset] = None


class AssetCatalog:
    """Assets, alignment tasks, selections and the alignment filter."""

    def __init__(self) -> None:
        self.assets: list[Asset] = []
        self.selected_index: Optional[int] = None
        self.alignments: list[Task] = []
        self.selected_alignment_index: Optional[int] = None
        self.filter_text: str = ""

    # Assets
    @property
    def selected_asset(self) -> Optional[Asset]:
        if self.selected_index is None:
            return None
        return self.assets[self.selected_index]

    def load_assets(self, assets: Iterable[Asset]) -> int:
        self.assets = list(assets)
        self.selected_index = None
        logger.info(f"Loaded {len(self.assets)} assets")
        return len(self.assets)

    def load_payload(self, data: Any) -> int:
        return self.load_assets(assets_from_payload(data))

    def load_assets_file(self, raw: bytes | str) -> int:
        """Load an uploaded JSON manifest."""
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise AssetLoadError(message=f"Invalid JSON: {e}") from e
        return self.load_payload(data)

    def load_demo_assets(self) -> int:
        return self.load_payload({"assets": DEMO_ASSETS})

    def add_asset_from_source(self, source_url: str, title: Optional[str] = None) -> Asset:
        """Build an asset from a URL and make it the only loaded asset."""
        asset = asset_from_source(source_url, title)
        self.load_assets([asset])
        return asset

    def select_asset(self, index: int) -> Asset:
        if index < 0 or index >= len(self.assets):
            raise AssetNotFoundError(details={"index": index, "count": len(self.assets)})
        self.selected_index = index
        return self.assets[index]

    # Alignments
    def set_alignments(self, tasks: Any) -> list[Task]:
        if not isinstance(tasks, list):
            tasks = []
        self.alignments = [
            task for task in tasks if any(t.is_alignment for t in task.targets)
        ]
        self.selected_alignment_index = None
        return self.alignments

    def matches_filter(self, task: Task) -> bool:
        target = task.alignment_target()
        filename = source_filename(target) if target else ""
        source_text = f"Source: {filename or 'Unknown'}".lower()
        return self.filter_text.lower() in source_text

    def filter_alignments(self, text: str) -> list[Task]:
        self.filter_text = text
        return [task for task in self.alignments if self.matches_filter(task)]

    def select_alignment(self, index: int) -> AlignmentSelection:
        if index < 0 or index >= len(self.alignments):
            raise AlignmentUnavailableError(
                message="Alignment not found", details={"index": index}
            )
        self.selected_alignment_index = index
        task = self.alignments[index]

        target = task.alignment_target()
        if target is None:
            raise AlignmentUnavailableError(
                message="No alignment target found",
                details={"error": "No alignment target in task", "task": task.to_wire()},
            )
        if not target.is_completed:
            raise AlignmentUnavailableError(
                message=f"Alignment status: {target.status}",
                details={"task_id": task.id, "status": target.status},
            )
        if not target.output:
            raise AlignmentUnavailableError(
                message="No output available for this alignment",
                details={"error": "No output in completed alignment", "task_id": task.id},
            )

        output = target.json_output()
        if output is None or not output.link:
            raise AlignmentUnavailableError(
                message="No JSON output found",
                details={
                    "error": "No JSON output",
                    "outputs": [o.model_dump() for o in target.output],
                },
            )

        fallback = None
        if target.url and not self.assets:
            fallback = Asset(src=target.url, title="Task Media", format="audio/mpeg")

        return AlignmentSelection(
            task=task, target=target, link=output.link, fallback_media=fallback
        )
