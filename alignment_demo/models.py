"""Database models for the local secret store."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Credential(SQLModel, table=True):
    """One stored secret, keyed by a fixed name such as ``apiKey``."""

    __tablename__ = "credentials"

    name: str = Field(primary_key=True, max_length=64)
    value: str
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)


__all__ = ["Credential"]
