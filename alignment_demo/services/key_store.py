"""Key-value persistence for the provider API key."""

from __future__ import annotations

import abc
import logging
from datetime import datetime, timezone
from typing import Optional

from ..db import SessionFactory, session_scope
from ..models import Credential

logger = logging.getLogger(__name__)


class IKeyStore(abc.ABC):
    """Small secret store: one value per key name."""

    @abc.abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abc.abstractmethod
    async def put(self, key: str, value: str) -> None:
        pass

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        pass


class InMemoryKeyStore(IKeyStore):
    """Process-local store, used in tests and when no database is wanted."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def put(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)


class SqlKeyStore(IKeyStore):
    """Store backed by the ``credentials`` table; one transaction per call."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        async with session_scope(self._session_factory) as session:
            credential = await session.get(Credential, key)
            return credential.value if credential else None

    async def put(self, key: str, value: str) -> None:
        async with session_scope(self._session_factory) as session:
            credential = await session.get(Credential, key)
            if credential is None:
                session.add(Credential(name=key, value=value))
            else:
                credential.value = value
                credential.updated_at = datetime.now(timezone.utc)
                session.add(credential)
        logger.info("Stored credential", extra={"context": {"name": key}})

    async def delete(self, key: str) -> None:
        async with session_scope(self._session_factory) as session:
            credential = await session.get(Credential, key)
            if credential is not None:
                await session.delete(credential)
        logger.info("Deleted credential", extra={"context": {"name": key}})
