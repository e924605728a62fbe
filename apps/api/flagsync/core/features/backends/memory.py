"""
In-memory definition store.

For development and testing. Data is lost on restart unless re-seeded.
"""

import copy
import json
from pathlib import Path
from typing import Any

import structlog

from flagsync.schemas.sdk import DefinitionSeed

from ..interfaces import SDKConnection, DefinitionStore

logger = structlog.get_logger()


class MemoryDefinitionStore(DefinitionStore):
    """
    In-memory canonical definition storage.

    Useful for:
    - Development without the external store
    - Unit testing
    - Serving a static definition snapshot from a JSON file
    """

    def __init__(self):
        self._connections: dict[str, SDKConnection] = {}
        self._features: dict[str, dict[str, Any]] = {}
        self._experiments: list[dict[str, Any]] = []
        self._id_lists: dict[str, list[str]] = {}

    # ============================================================
    # READ OPERATIONS
    # ============================================================

    async def get_connection(self, key: str) -> SDKConnection | None:
        """Get an SDK connection by client key."""
        return self._connections.get(key)

    async def list_features(self) -> dict[str, dict[str, Any]]:
        """Snapshot of the canonical feature map."""
        return copy.deepcopy(self._features)

    async def list_experiments(self) -> list[dict[str, Any]]:
        """Snapshot of the canonical auto experiments."""
        return copy.deepcopy(self._experiments)

    async def get_id_lists(self) -> dict[str, list[str]]:
        """Snapshot of saved group memberships."""
        return copy.deepcopy(self._id_lists)

    # ============================================================
    # TEST HELPERS
    # ============================================================

    def clear(self) -> None:
        """Clear all data. Useful for testing."""
        self._connections.clear()
        self._features.clear()
        self._experiments.clear()
        self._id_lists.clear()

    def seed(
        self,
        connections: list[SDKConnection] | None = None,
        features: dict[str, dict[str, Any]] | None = None,
        experiments: list[dict[str, Any]] | None = None,
        id_lists: dict[str, list[str]] | None = None,
    ) -> None:
        """Seed with definitions. Existing entries with the same keys are replaced."""
        for connection in connections or []:
            self._connections[connection.key] = connection
        if features:
            self._features.update(copy.deepcopy(features))
        if experiments:
            self._experiments.extend(copy.deepcopy(experiments))
        if id_lists:
            self._id_lists.update(copy.deepcopy(id_lists))

    def load_file(self, path: str | Path) -> None:
        """Seed from a JSON document (connections, features, experiments, savedGroups)."""
        document = DefinitionSeed.model_validate(json.loads(Path(path).read_text()))
        self.seed(
            connections=[
                SDKConnection(
                    key=c.key,
                    name=c.name,
                    projects=c.projects,
                    capabilities=c.capabilities,
                    include_experiments=c.includeExperiments,
                )
                for c in document.connections
            ],
            features=document.features,
            experiments=document.experiments,
            id_lists=document.savedGroups,
        )
        logger.info(
            "Loaded definition seed",
            path=str(path),
            connections=len(document.connections),
            features=len(document.features),
            experiments=len(document.experiments),
        )
