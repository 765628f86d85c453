"""Workflow orchestration for the alignment demo session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from .services.audioshake_models import Task
from .services.catalog import AlignmentSelection
from .services.diagnostics import EntryLevel
from .services.exceptions import (
    AlignmentDemoError,
    AlignmentInProgressError,
    AlignmentUnavailableError,
    AssetLoadError,
    AssetNotSelectedError,
    AuthError,
    FetchError,
    ParseError,
    UnknownMethodError,
)
from .services.normalizer import AlignmentDocument, describe_structure, normalize_alignment
from .services.poller import PollHandle
from .session import DemoSession

logger = logging.getLogger(__name__)

API_METHODS = ("createTask", "getTask", "listTasks", "getTaskStatistics")


def _report_failure(session: DemoSession, error: AlignmentDemoError) -> None:
    session.diagnostics.error({"error": error.message})
    session.diagnostics.notify(f"Error: {error.message}")


# API key
async def save_api_key(session: DemoSession, key: str) -> None:
    await session.client.set_api_key(key)
    session.diagnostics.notify("API key saved")
    await load_alignments(session)


async def clear_api_key(session: DemoSession) -> None:
    await cancel_alignment(session)
    await session.client.clear_api_key()
    session.catalog.set_alignments([])
    session.diagnostics.notify("API key cleared")


# Assets
async def load_assets_from_url(session: DemoSession, url: str) -> int:
    try:
        data = await session.client.fetch_json(url.strip(), what="assets")
        count = session.catalog.load_payload(data)
    except (FetchError, AssetLoadError) as e:
        session.diagnostics.notify(f"Error loading URL: {e.message}")
        raise AssetLoadError(message=f"Error loading URL: {e.message}", details=e.details) from e
    session.diagnostics.notify(f"Loaded {count} assets")
    return count


def load_assets_file(
    session: DemoSession, raw: bytes | str, filename: Optional[str] = None
) -> int:
    try:
        count = session.catalog.load_assets_file(raw)
    except AssetLoadError as e:
        session.diagnostics.notify(f"Error loading file: {e.message}")
        raise AssetLoadError(
            message=f"Error loading file: {e.message}",
            details={"filename": filename, "error": e.details},
        ) from e
    session.diagnostics.notify(f"Loaded {count} assets")
    return count


def load_demo_assets(session: DemoSession) -> int:
    count = session.catalog.load_demo_assets()
    session.diagnostics.notify(f"Loaded {count} assets")
    return count


def add_asset_from_source(
    session: DemoSession, source_url: str, title: Optional[str] = None
) -> int:
    session.catalog.add_asset_from_source(source_url, title)
    session.diagnostics.notify("Loaded 1 assets")
    return 1


async def select_asset(session: DemoSession, index: int) -> None:
    asset = session.catalog.select_asset(index)
    session.load_media(asset)
    await load_alignments(session)


# Alignments
async def load_alignments(
    session: DemoSession, skip: int = 0, take: Optional[int] = None
) -> list[Task]:
    """Refresh the alignment list. Failures are logged, never raised."""
    if not session.client.has_api_key():
        return []

    take = take or session.settings.alignments_take
    try:
        tasks = await session.client.list_tasks({"skip": skip, "take": take})
    except AlignmentDemoError as e:
        logger.error(
            "Error loading alignments",
            extra={"context": {"error_message": e.message}},
        )
        return session.catalog.alignments

    return session.catalog.set_alignments(tasks)


async def create_alignment(session: DemoSession) -> Task:
    """Create an alignment task for the selected asset and start polling it."""
    if not session.client.has_api_key():
        raise AuthError()

    asset = session.catalog.selected_asset
    if asset is None:
        session.diagnostics.notify(AssetNotSelectedError.message)
        raise AssetNotSelectedError()

    if session.polling:
        raise AlignmentInProgressError(details={"task_id": session.poll.task_id})

    session.diagnostics.notify("Creating alignment task...")
    try:
        task = await session.client.create_alignment_task(
            asset.src,
            formats=session.settings.default_formats,
            language=session.settings.default_language,
        )
    except AlignmentDemoError as e:
        _report_failure(session, e)
        raise
    session.diagnostics.add(task.to_wire(), EntryLevel.SUCCESS)

    session.diagnostics.notify("Processing... This may take a few minutes")
    session.poll = session.poller.start(
        task.id,
        on_update=lambda update: session.diagnostics.add(update.to_wire(), EntryLevel.INFO),
    )
    session.alignment_job = asyncio.create_task(
        finish_alignment(session, session.poll),
        name=f"finish-alignment-{task.id}",
    )
    return task


async def finish_alignment(
    session: DemoSession, handle: PollHandle
) -> Optional[AlignmentDocument]:
    """Wait for the poll to end, then show the resulting lyrics."""
    try:
        completed = await handle.wait()
    except AlignmentDemoError as e:
        _report_failure(session, e)
        return None
    except Exception as e:
        logger.exception(
            "Alignment polling crashed",
            extra={"context": {"task_id": handle.task_id}},
            exc_info=e,
        )
        session.diagnostics.error({"error": str(e)})
        return None

    session.diagnostics.notify("Alignment completed!")
    await load_alignments(session)

    target = completed.alignment_target()
    if not target or not target.output:
        return None
    output = next((o for o in target.output if o.format == "json"), None)
    if output is None or not output.link:
        return None

    try:
        return await load_alignment_data(session, output.link)
    except AlignmentDemoError:
        # Already reported by load_alignment_data
        return None


async def cancel_alignment(session: DemoSession) -> bool:
    """Stop the running poll and wait for its job to report the outcome."""
    if session.poll is None or not session.poll.cancel():
        return False
    if session.alignment_job is not None:
        await session.alignment_job
    return True


async def select_alignment(session: DemoSession, index: int) -> AlignmentDocument:
    try:
        selection: AlignmentSelection = session.catalog.select_alignment(index)
    except AlignmentUnavailableError as e:
        session.diagnostics.notify(e.message)
        if e.details and "error" in e.details:
            session.diagnostics.error(e.details)
        raise

    if selection.fallback_media is not None:
        session.load_media(selection.fallback_media)

    return await load_alignment_data(session, selection.link)


async def load_alignment_data(session: DemoSession, url: str) -> AlignmentDocument:
    """Fetch an alignment artifact, normalize it and render it."""
    diagnostics = session.diagnostics
    diagnostics.add({"info": f"Fetching alignment from: {url}"})
    try:
        data = await session.client.fetch_alignment(url)
    except FetchError as e:
        diagnostics.notify(f"Error loading alignment: {e.message}")
        diagnostics.error({"error": e.message, "url": url})
        raise

    structure = describe_structure(data)
    diagnostics.add(
        {"success": "Alignment data loaded", "structure": structure},
        EntryLevel.SUCCESS,
    )

    document = normalize_alignment(data)
    session.highlighter.render(document)
    session.scroll_target = None

    if not document.recognized:
        diagnostics.error({"error": "Cannot parse alignment", "structure": structure})
        raise ParseError(details={"structure": structure})

    diagnostics.add(
        {
            "success": f"Loaded {document.total_words} words "
            f"in {document.source_line_count} lines"
        },
        EntryLevel.SUCCESS,
    )
    return document


# API console buttons
async def execute_api_method(
    session: DemoSession,
    method: str,
    task_id: Optional[str] = None,
    name: str = "usage",
) -> Any:
    """Run one raw provider call and log its result to the console."""
    client = session.client
    if not client.has_api_key():
        session.diagnostics.notify("Please authorize first")
        raise AuthError()
    if method not in API_METHODS:
        raise UnknownMethodError(details={"method": method, "methods": list(API_METHODS)})

    try:
        result: Any = None
        if method == "createTask":
            asset = session.catalog.selected_asset
            if asset is None:
                session.diagnostics.notify(AssetNotSelectedError.message)
                raise AssetNotSelectedError()
            result = (await client.create_alignment_task(asset.src)).to_wire()
            session.diagnostics.add(result, EntryLevel.SUCCESS)
            session.diagnostics.notify("Task created successfully")
        elif method == "getTask":
            if task_id:
                result = (await client.get_task(task_id)).to_wire()
                session.diagnostics.add(result, EntryLevel.SUCCESS)
        elif method == "listTasks":
            result = [task.to_wire() for task in await client.list_tasks({"take": 10})]
            session.diagnostics.add(result, EntryLevel.SUCCESS)
        elif method == "getTaskStatistics":
            result = await client.get_task_statistics(name)
            session.diagnostics.add(result, EntryLevel.SUCCESS)
    except AssetNotSelectedError:
        raise
    except AlignmentDemoError as e:
        _report_failure(session, e)
        raise
    return result
