"""Abstract base classes for collaborators the API depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod


class DatabaseService(ABC):
    """Interface for the database collaborator used by the health check.

    The API never implements storage itself; it only asks the collaborator
    whether it is reachable and closes it on shutdown.
    """

    @abstractmethod
    async def health(self) -> dict[str, str]:
        """Return a flat status mapping; ``status`` is ``"up"`` or ``"down"``."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the collaborator."""
        ...
