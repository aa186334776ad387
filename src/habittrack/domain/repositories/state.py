"""State repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class StateRepository(Protocol):
    """Storage collaborator holding serialized state documents by key."""

    def load(self, key: str) -> Optional[str]:
        """Return the stored payload, or None when nothing was saved."""
        ...

    def save(self, key: str, payload: str) -> None:
        """Replace the payload stored under ``key``."""
        ...

    def delete(self, key: str) -> None:
        """Remove the payload stored under ``key``."""
        ...
