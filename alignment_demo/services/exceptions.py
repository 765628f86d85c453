"""Errors raised by the provider client, the poller and the catalog."""

from __future__ import annotations

from typing import Any, Optional

from alignment_demo.core.errors import BaseError


class AlignmentDemoError(BaseError):
    """Base class for recoverable console errors."""

    code = "alignment_demo_error"
    message = "Alignment demo error"


# Provider client
class AuthError(AlignmentDemoError):
    """No API key is set."""

    status_code = 401
    code = "auth_error"
    message = "API key not set. Please authorize first."


class NetworkError(AlignmentDemoError):
    """Transport failure talking to the provider."""

    status_code = 502
    code = "network_error"
    message = "Network error. Please check your connection."


class APIError(AlignmentDemoError):
    """Provider answered with a non-2xx status."""

    status_code = 502
    code = "api_error"
    message = "API error"

    def __init__(
        self,
        status: int,
        message: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.status = status
        super().__init__(
            message=message or f"API Error: {status}",
            details=details,
        )

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = self.status
        return payload


class FetchError(AlignmentDemoError):
    """Artifact download failed."""

    status_code = 502
    code = "fetch_error"
    message = "Error fetching alignment data"


# Poller
class NoTargetError(AlignmentDemoError):
    status_code = 502
    code = "no_target_error"
    message = "No targets found in task"


class TaskFailedError(AlignmentDemoError):
    status_code = 422
    code = "task_failed_error"
    message = "Task failed"


class PollTimeoutError(AlignmentDemoError):
    status_code = 504
    code = "poll_timeout_error"
    message = "Polling timeout - task still processing"


class PollCancelledError(AlignmentDemoError):
    status_code = 409
    code = "poll_cancelled_error"
    message = "Polling cancelled"


# Normalizer
class ParseError(AlignmentDemoError):
    status_code = 422
    code = "parse_error"
    message = "Cannot parse alignment"


# Catalog and session
class AssetLoadError(AlignmentDemoError):
    code = "asset_load_error"
    message = "Error loading assets"


class AssetNotFoundError(AlignmentDemoError):
    status_code = 404
    code = "asset_not_found_error"
    message = "Asset not found"


class AssetNotSelectedError(AlignmentDemoError):
    code = "asset_not_selected_error"
    message = "Please select an asset first"


class AlignmentUnavailableError(AlignmentDemoError):
    status_code = 409
    code = "alignment_unavailable_error"
    message = "Alignment is not available"


class AlignmentInProgressError(AlignmentDemoError):
    status_code = 409
    code = "alignment_in_progress_error"
    message = "An alignment is already being processed"


class UnknownMethodError(AlignmentDemoError):
    status_code = 404
    code = "unknown_method_error"
    message = "Unknown API method"


class InvalidResponseError(AlignmentDemoError):
    """Provider answered 2xx with a body that is not a task payload."""

    status_code = 502
    code = "invalid_response_error"
    message = "Unexpected response from the provider"


class WordNotFoundError(AlignmentDemoError):
    status_code = 404
    code = "word_not_found_error"
    message = "No rendered word with this index"
