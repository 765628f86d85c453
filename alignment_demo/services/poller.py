"""Single-flight status polling for one provider task."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional

from .audioshake_client import IAudioShakeClient
from .audioshake_models import Task
from .exceptions import (
    NoTargetError,
    PollCancelledError,
    PollTimeoutError,
    TaskFailedError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 60
DEFAULT_INTERVAL_SECONDS = 4.0

TaskObserver = Callable[[Task], None]


class PollState(str, enum.Enum):
    """States of one poll run. Everything except POLLING is terminal."""

    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"
    ERROR = "error"
    CANCELLED = "cancelled"


class TaskPoller:
    """Fetch a task until its first target is terminal or attempts run out."""

    def __init__(
        self,
        client: IAudioShakeClient,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self.client = client
        self.max_attempts = max_attempts
        self.interval = interval

    async def poll(
        self,
        task_id: str,
        on_update: Optional[TaskObserver] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> Task:
        max_attempts = self.max_attempts if max_attempts is None else max_attempts
        interval = self.interval if interval is None else interval

        attempts = 0
        while True:
            attempts += 1
            task = await self.client.get_task(task_id)

            if on_update:
                on_update(task)

            # targets[0] is the alignment target for tasks this console creates
            target = task.primary_target
            log_context = {"task_id": task_id, "attempt": attempts}

            if target is None:
                raise NoTargetError(details={"task_id": task_id})

            if target.is_completed:
                logger.info("Task completed", extra={"context": log_context})
                return task
            if target.is_failed:
                raise TaskFailedError(
                    message=str(target.error) if target.error else None,
                    details={"task_id": task_id},
                )
            if attempts >= max_attempts:
                raise PollTimeoutError(
                    details={"task_id": task_id, "attempts": attempts},
                )

            logger.debug(
                "Task still processing",
                extra={"context": {**log_context, "status": target.status}},
            )
            await asyncio.sleep(interval)

    def start(
        self,
        task_id: str,
        on_update: Optional[TaskObserver] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> PollHandle:
        """Run ``poll`` in the background and return a cancellable handle."""
        handle = PollHandle(task_id)
        handle._task = asyncio.create_task(
            handle._run(self.poll, task_id, on_update, max_attempts, interval),
            name=f"poll-task-{task_id}",
        )
        handle._task.add_done_callback(handle._on_done)
        return handle


class PollHandle:
    """Handle to a background poll run."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        self.state = PollState.POLLING
        self.error: Optional[BaseException] = None
        self._task: Optional[asyncio.Task] = None

    async def _run(self, poll: Callable[..., Awaitable[Task]], *args) -> Task:
        try:
            task = await poll(*args)
        except asyncio.CancelledError:
            self.state = PollState.CANCELLED
            raise
        except TaskFailedError as e:
            self._finish(PollState.FAILED, e)
            raise
        except PollTimeoutError as e:
            self._finish(PollState.TIMEOUT, e)
            raise
        except Exception as e:
            self._finish(PollState.ERROR, e)
            raise
        self.state = PollState.COMPLETED
        return task

    def _finish(self, state: PollState, error: BaseException) -> None:
        self.state = state
        self.error = error
        logger.warning(
            "Polling stopped",
            extra={
                "context": {
                    "task_id": self.task_id,
                    "state": state.value,
                    "error_message": str(error),
                }
            },
        )

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self.state = PollState.CANCELLED
        else:
            # Marks the error as retrieved when nobody awaits the handle
            task.exception()

    @property
    def done(self) -> bool:
        return self.state is not PollState.POLLING

    def cancel(self) -> bool:
        """Stop polling at the current suspension point."""
        if self._task is None or self._task.done():
            return False
        logger.info("Polling cancelled", extra={"context": {"task_id": self.task_id}})
        return self._task.cancel()

    async def wait(self) -> Task:
        """Return the completed task or raise the terminal error."""
        if self._task is None:
            raise RuntimeError("PollHandle must be created by TaskPoller.start")
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                self.state = PollState.CANCELLED
                raise PollCancelledError(details={"task_id": self.task_id})
            raise
