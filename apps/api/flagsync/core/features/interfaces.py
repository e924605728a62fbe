"""
Feature Definition Interfaces - Core abstractions.

These define the contracts between the SDK payload service and the
canonical definition store it reads from.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SDKConnection:
    """
    A client key registered for SDK access.

    Attributes:
        key: Client key used in GET /api/features/{key}
        name: Human-readable name
        projects: Only ship definitions from these projects (empty = all)
        capabilities: Default capability tags when the request sends none
        include_experiments: Ship auto experiments alongside features
    """
    key: str
    name: str = ""
    projects: list[str] = field(default_factory=list)
    capabilities: list[str] = field(default_factory=list)
    include_experiments: bool = True

    def includes_project(self, project: str | None) -> bool:
        """Definitions without a project are shipped to every connection."""
        if not self.projects or not project:
            return True
        return project in self.projects


class ConnectionNotFound(LookupError):
    """Raised when a client key has no registered SDK connection."""

    def __init__(self, key: str):
        super().__init__(f"SDK connection '{key}' not found")
        self.key = key


class DefinitionStore(ABC):
    """
    Abstract read access to canonical definitions.

    Implementations:
    - MemoryDefinitionStore: In-memory (dev/testing)

    Long-term storage lives outside this service; backends only expose
    read-only snapshots.
    """

    @abstractmethod
    async def get_connection(self, key: str) -> SDKConnection | None:
        """Get an SDK connection by client key."""
        pass

    @abstractmethod
    async def list_features(self) -> dict[str, dict[str, Any]]:
        """Canonical feature map, keyed by feature key, in stored order."""
        pass

    @abstractmethod
    async def list_experiments(self) -> list[dict[str, Any]]:
        """Canonical auto experiments, in stored order."""
        pass

    @abstractmethod
    async def get_id_lists(self) -> dict[str, list[str]]:
        """Saved group id -> member ids."""
        pass


class PayloadServiceBase(ABC):
    """
    Abstract SDK payload service.

    This is the main entry point for the features endpoint.
    """

    @abstractmethod
    async def get_payload(
        self,
        client_key: str,
        capabilities: Any | None = None,
    ) -> dict[str, Any]:
        """
        Build the scrubbed payload for a client key.

        Args:
            client_key: SDK connection key
            capabilities: Capability tags; defaults to the connection's own

        Raises:
            ConnectionNotFound: if the key is not registered
        """
        pass
