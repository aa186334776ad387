"""SQLModel implementation of the state repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.state import StateRecord


class SQLModelStateRepository:
    """Stores each state document as a single ``state_record`` row."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            record = session.exec(select(StateRecord).where(StateRecord.key == key)).first()
            return record.payload if record else None

    def save(self, key: str, payload: str) -> None:
        with self.session_factory() as session:
            record = session.exec(select(StateRecord).where(StateRecord.key == key)).first()
            if record:
                record.payload = payload
                record.updated_at = datetime.now(timezone.utc)
            else:
                record = StateRecord(key=key, payload=payload)
            session.add(record)
            session.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            record = session.exec(select(StateRecord).where(StateRecord.key == key)).first()
            if record:
                session.delete(record)
                session.commit()


__all__ = ["SQLModelStateRepository"]
