"""Builder for ArchiveStore instances."""

from __future__ import annotations

from typing import Any, Self

from lasr_archive.configuration import ArchiveStoreConfiguration
from lasr_archive.store import ArchiveStore
from lasr_archive.types import ArchiveBackends, ConnectionPolicy


class ArchiveStoreBuilder:
    """Collects configuration fields and builds an ArchiveStore.

    ``uri``, ``backend`` and ``datastore`` are required. Only their presence
    is checked; an empty or malformed URI is reported by the backend on the
    first connection attempt.

    Example:
        ```python
        store = (
            ArchiveStoreBuilder()
            .uri("mongodb://localhost:27017")
            .backend(ArchiveBackends.MONGODB)
            .datastore("lasr_archive")
            .build()
        )
        ```

    """

    def __init__(self) -> None:
        self._properties: dict[str, Any] = {}

    def uri(self, uri: str) -> Self:
        """Set the backend-specific connection URI."""
        self._properties["uri"] = uri
        return self

    def backend(self, backend: ArchiveBackends | str) -> Self:
        """Set the archive backend, as an enum member or its value."""
        self._properties["backend"] = backend
        return self

    def datastore(self, datastore: str) -> Self:
        """Set the name of the archive datastore."""
        self._properties["datastore"] = datastore
        return self

    def connection_policy(self, policy: ConnectionPolicy | str) -> Self:
        self._properties["connection_policy"] = policy
        return self

    def server_selection_timeout_ms(self, timeout_ms: int) -> Self:
        self._properties["server_selection_timeout_ms"] = timeout_ms
        return self

    def build(self) -> ArchiveStore:
        """Build the store.

        Raises:
            ArchiveConfigError: If a required field was not set or a value
                is invalid

        """
        config = ArchiveStoreConfiguration.validate_properties(self._properties)
        return ArchiveStore(config)
