"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelStateRepository
from .logging_config import setup_logging
from .models.settings import AppSettings
from .services.store import HabitStore


@dataclass
class AppContext:
    """Owns the engine, storage and the single habit store for one session."""

    config: BaseConfig
    engine: Engine
    session_factory: Callable[[], Session]
    state_repo: SQLModelStateRepository
    store: HabitStore

    def close(self) -> None:
        self.engine.dispose()


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    on_persist_error: Optional[Callable[[Exception], None]] = None,
) -> AppContext:
    """Configure logging, build the store from configuration and load any saved state."""

    if config is None:
        config = BaseConfig()

    logger = setup_logging(config)

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)
    state_repo = SQLModelStateRepository(session_factory)

    store = HabitStore(
        state_repo,
        storage_key=config.STORAGE_KEY,
        settings=AppSettings(week_start=config.WEEK_START),
        on_persist_error=on_persist_error,
    )
    store.load()
    logger.info(
        "Application context ready",
        extra={"storage_key": config.STORAGE_KEY, "habits": len(store)},
    )

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        state_repo=state_repo,
        store=store,
    )
