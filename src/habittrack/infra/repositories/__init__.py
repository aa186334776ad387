"""SQLModel repository implementations."""

from .state import SQLModelStateRepository

__all__ = ["SQLModelStateRepository"]
