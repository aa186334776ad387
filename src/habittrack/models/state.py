"""Key/value table holding the serialized application state."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


class StateRecord(SQLModel, table=True):
    """One JSON document per storage key, rewritten in full on every save."""

    __tablename__: ClassVar[str] = "state_record"

    key: str = Field(primary_key=True, max_length=64)
    payload: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
