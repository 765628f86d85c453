import abc
import logging
from abc import abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import httpx
from pydantic import ValidationError

from alignment_demo.services.audioshake_models import (
    ALIGNMENT_MODEL,
    CreateTaskRequest,
    Task,
    TargetRequest,
)
from alignment_demo.services.exceptions import (
    AlignmentDemoError,
    APIError,
    AuthError,
    FetchError,
    InvalidResponseError,
    NetworkError,
)
from alignment_demo.services.key_store import IKeyStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.audioshake.ai"
DEFAULT_KEY_NAME = "apiKey"


class KeyEvent(str, Enum):
    LOADED = "keyLoaded"
    UPDATED = "keyUpdated"
    CLEARED = "keyCleared"


KeyListener = Callable[[Optional[str]], None]


class IAudioShakeClient(abc.ABC):
    """Interface of the AudioShake tasks API client."""

    @abstractmethod
    async def create_task(
        self,
        url: str,
        targets: Sequence[Mapping[str, Any] | TargetRequest],
        callback_url: Optional[str] = None,
    ) -> Task:
        pass

    @abstractmethod
    async def create_alignment_task(
        self, url: str, formats: Optional[List[str]] = None, language: str = "en"
    ) -> Task:
        pass

    @abstractmethod
    async def get_task(self, task_id: str) -> Task:
        pass

    @abstractmethod
    async def list_tasks(self, params: Optional[Mapping[str, Any]] = None) -> List[Task]:
        pass

    @abstractmethod
    async def get_task_statistics(self, name: str = "usage") -> Any:
        pass

    @abstractmethod
    async def fetch_alignment(self, url: str) -> Any:
        pass


class AudioShakeClient(IAudioShakeClient):
    """httpx based client for the AudioShake tasks API.

    The API key lives in the client and in the key store; every change
    goes through ``set_api_key`` / ``clear_api_key`` and is announced to
    the listeners registered with ``subscribe``.
    """

    def __init__(
        self,
        key_store: IKeyStore,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        key_name: str = DEFAULT_KEY_NAME,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.key_name = key_name
        self._key_store = key_store
        self._transport = transport
        self._api_key: Optional[str] = None
        self._listeners: Dict[KeyEvent, List[KeyListener]] = {}
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self):
        if self._client is None:
            raise RuntimeError(
                "AudioShakeClient must be used within async context manager"
            )

    # Key events
    def subscribe(self, event: KeyEvent, listener: KeyListener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def unsubscribe(self, event: KeyEvent, listener: KeyListener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def _emit(self, event: KeyEvent, key: Optional[str] = None) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener(key)

    # Key management
    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    def has_api_key(self) -> bool:
        return bool(self._api_key)

    async def load_stored_key(self) -> Optional[str]:
        """Read the stored key on startup. Store failures only get logged."""
        try:
            key = await self._key_store.get(self.key_name)
        except Exception as e:
            logger.error(
                "Error loading stored key",
                extra={"context": {"error_type": type(e).__name__, "error_message": str(e)}},
            )
            return None

        if key:
            self._api_key = key
            self._emit(KeyEvent.LOADED, key)
            logger.info("Stored API key loaded")
        return self._api_key

    async def set_api_key(self, key: str) -> None:
        self._api_key = key
        await self._key_store.put(self.key_name, key)
        self._emit(KeyEvent.UPDATED, key)

    async def clear_api_key(self) -> None:
        self._api_key = None
        await self._key_store.delete(self.key_name)
        self._emit(KeyEvent.CLEARED)

    # Requests
    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as e:
                raise APIError(
                    status=response.status_code,
                    message=f"Invalid JSON in response: {e}",
                ) from e
        return {"message": response.text, "status": response.status_code}

    @staticmethod
    def _error_message(body: Any) -> Optional[str]:
        if isinstance(body, dict):
            return body.get("message") or body.get("error") or None
        return None

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Authenticated call; returns the parsed body unchanged."""
        if not self._api_key:
            raise AuthError()
        self._ensure_client()

        response = None
        parsed_response = None
        error = None

        headers = {"x-api-key": self._api_key}
        if json is not None:
            headers["Content-Type"] = "application/json"

        logger.info(
            "Provider request started",
            extra={
                "context": {
                    "method": method,
                    "endpoint": endpoint,
                    "params": dict(params) if params else None,
                    "base_url": self.base_url,
                }
            },
        )

        try:
            response = await self._client.request(
                method,
                f"{self.base_url}{endpoint}",
                headers=headers,
                json=json,
                params=params or None,
            )
            parsed_response = self._parse_body(response)

            if not response.is_success:
                raise APIError(
                    status=response.status_code,
                    message=self._error_message(parsed_response),
                    details={"response": parsed_response},
                )

            return parsed_response

        except httpx.RequestError as e:
            error = NetworkError(
                details={"error_type": type(e).__name__, "error_message": str(e)},
            )
            raise error from e
        except AlignmentDemoError as e:
            error = e
            raise
        finally:
            if not error:
                logger.info(
                    "Provider request finished success",
                    extra={
                        "context": {
                            "method": method,
                            "endpoint": endpoint,
                            "status_code": response.status_code if response else None,
                        }
                    },
                )
            else:
                context = {"method": method, "endpoint": endpoint}
                if response is not None:
                    context["status_code"] = response.status_code
                    if parsed_response is not None:
                        context["parsed_response"] = parsed_response
                    else:
                        context["text_response"] = response.text
                context["error_message"] = str(error)
                logger.error(
                    "Provider request finished with error",
                    extra={"context": context},
                )

    @staticmethod
    def _to_task(body: Any) -> Task:
        try:
            return Task.model_validate(body)
        except ValidationError as e:
            raise InvalidResponseError(
                details={"validation_errors": e.errors(include_url=False, include_context=False)},
            ) from e

    async def create_task(
        self,
        url: str,
        targets: Sequence[Mapping[str, Any] | TargetRequest],
        callback_url: Optional[str] = None,
    ) -> Task:
        """Create a task for ``url`` with caller supplied targets.

        ``callbackUrl`` is only sent when given.
        """
        payload = CreateTaskRequest(
            url=url,
            targets=[TargetRequest.model_validate(target) for target in targets],
            callback_url=callback_url,
        )
        body = await self.request(
            "POST",
            "/tasks",
            json=payload.model_dump(by_alias=True, exclude_none=True),
        )
        return self._to_task(body)

    async def create_alignment_task(
        self, url: str, formats: Optional[List[str]] = None, language: str = "en"
    ) -> Task:
        return await self.create_task(
            url,
            [
                TargetRequest(
                    model=ALIGNMENT_MODEL,
                    formats=list(formats) if formats else ["json"],
                    language=language,
                )
            ],
        )

    async def get_task(self, task_id: str) -> Task:
        body = await self.request("GET", f"/tasks/{task_id}")
        return self._to_task(body)

    async def list_tasks(self, params: Optional[Mapping[str, Any]] = None) -> List[Task]:
        body = await self.request("GET", "/tasks", params=params)
        if not isinstance(body, list):
            logger.warning(
                "Task list response is not an array",
                extra={"context": {"response_type": type(body).__name__}},
            )
            return []

        tasks = []
        for position, item in enumerate(body):
            try:
                tasks.append(self._to_task(item))
            except InvalidResponseError as e:
                logger.warning(
                    "Skipping malformed task in listing",
                    extra={"context": {"position": position, "details": e.details}},
                )
        return tasks

    async def get_task_statistics(self, name: str = "usage") -> Any:
        return await self.request("GET", "/tasks/statistics", params={"name": name})

    async def validate_key(self) -> bool:
        try:
            await self.list_tasks({"limit": 1})
            return True
        except AlignmentDemoError:
            return False

    async def fetch_json(self, url: str, what: str = "document") -> Any:
        """Unauthenticated GET of an arbitrary JSON document."""
        self._ensure_client()
        try:
            response = await self._client.get(url)
            if not response.is_success:
                raise FetchError(
                    message=f"Failed to fetch {what}: {response.status_code}",
                    details={"url": url, "status_code": response.status_code},
                )
            return response.json()
        except FetchError:
            raise
        except (httpx.HTTPError, ValueError) as e:
            raise FetchError(
                message=f"{type(e).__name__}: {e}",
                details={"url": url, "error_type": type(e).__name__},
            ) from e

    async def fetch_alignment(self, url: str) -> Any:
        try:
            return await self.fetch_json(url, what="alignment")
        except FetchError as e:
            logger.error(
                "Alignment fetch failed",
                extra={"context": {"url": url, "error_message": e.message}},
            )
            raise FetchError(
                message=f"Error fetching alignment data: {e.message}",
                details=e.details,
            ) from e
