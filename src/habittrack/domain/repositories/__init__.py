"""Repository protocols."""

from .state import StateRepository

__all__ = ["StateRepository"]
