"""
SDK Payload Service - Builds the body served to SDKs.

For a client key it:
- Resolves the SDK connection and its default capabilities
- Filters definitions to the connection's projects
- Scrubs features, experiments and saved groups for the capability set
"""

from typing import Any, Iterable

import structlog

from flagsync.core.sdk import (
    CapabilitySet,
    scrub_experiments,
    scrub_features,
    scrub_id_lists,
)

from .interfaces import (
    ConnectionNotFound,
    DefinitionStore,
    PayloadServiceBase,
)

logger = structlog.get_logger()


class SDKPayloadService(PayloadServiceBase):
    """
    SDK payload assembly service.

    Output key order is fixed (features, experiments, savedGroups) so
    identical inputs serialize to identical bytes.
    """

    def __init__(self, store: DefinitionStore):
        self.store = store

    async def get_payload(
        self,
        client_key: str,
        capabilities: CapabilitySet | Iterable[str] | None = None,
    ) -> dict[str, Any]:
        """
        Build the scrubbed payload for a client key.

        Args:
            client_key: SDK connection key
            capabilities: Capability tags; defaults to the connection's own

        Raises:
            ConnectionNotFound: if the key is not registered
        """
        connection = await self.store.get_connection(client_key)
        if connection is None:
            raise ConnectionNotFound(client_key)

        if capabilities is None:
            caps = CapabilitySet.parse(connection.capabilities)
        else:
            caps = CapabilitySet.coerce(capabilities)

        id_lists = await self.store.get_id_lists()
        features = {
            key: feature
            for key, feature in (await self.store.list_features()).items()
            if connection.includes_project(feature.get("project"))
        }

        payload: dict[str, Any] = {
            "features": scrub_features(features, caps, id_lists),
        }

        if connection.include_experiments:
            experiments = [
                experiment
                for experiment in await self.store.list_experiments()
                if connection.includes_project(experiment.get("project"))
            ]
            payload["experiments"] = scrub_experiments(experiments, caps, id_lists)

        saved_groups = scrub_id_lists(id_lists, caps)
        if saved_groups is not None:
            payload["savedGroups"] = saved_groups

        logger.debug(
            "Built SDK payload",
            client_key=client_key,
            capabilities=list(caps.tags()),
            features=len(payload["features"]),
            experiments=len(payload.get("experiments", [])),
        )
        return payload
