"""ArchiveStore facade.

The store is the public entry point. It holds the connection configuration
and forwards each operation to the backend selected for it, adding context
to any failure so callers can tell which operation failed.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any, Self

from pydantic import BaseModel

from lasr_archive.backends.base import ArchiveBackend, Record
from lasr_archive.configuration import ArchiveStoreConfiguration
from lasr_archive.errors import ArchiveError
from lasr_archive.factory import create_backend
from lasr_archive.models import PartialFindResult
from lasr_archive.types import ArchiveBackends, ArchiveRecordType, ConnectionPolicy

logger = logging.getLogger(__name__)

BackendFactory = Callable[[ArchiveStoreConfiguration], ArchiveBackend]


class ArchiveStore:
    """Archive datastore facade.

    Records are opaque to the store. Each record is tagged with an
    ArchiveRecordType, which decides where the backend keeps it.

    With ``ConnectionPolicy.PER_CALL`` (the default) every operation gets a
    fresh backend that is closed when the operation ends, whether it
    succeeded or not. With ``ConnectionPolicy.POOLED`` the store keeps one
    backend until ``close()`` is called.

    Example:
        ```python
        store = (
            ArchiveStoreBuilder()
            .uri("mongodb://localhost:27017")
            .backend(ArchiveBackends.MONGODB)
            .datastore("lasr_archive")
            .build()
        )
        record_id = await store.create(ArchiveRecordType.ACCOUNT, document)
        accounts = await store.find_all(ArchiveRecordType.ACCOUNT, Account)
        ```

    """

    def __init__(
        self,
        config: ArchiveStoreConfiguration,
        backend_factory: BackendFactory = create_backend,
    ) -> None:
        """Initialise store with validated configuration.

        Args:
            config: Validated archive store configuration
            backend_factory: Creates a backend for the configuration

        """
        self._config = config
        self._backend_factory = backend_factory
        self._pooled_backend: ArchiveBackend | None = None

    @classmethod
    def from_configuration(cls, config: ArchiveStoreConfiguration) -> Self:
        """Create a store from an existing configuration."""
        return cls(config)

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create a store from a properties dict with environment fallback.

        Raises:
            ArchiveConfigError: If configuration is missing or invalid

        """
        return cls(ArchiveStoreConfiguration.from_properties(properties))

    @property
    def configuration(self) -> ArchiveStoreConfiguration:
        return self._config

    @property
    def uri(self) -> str:
        return self._config.uri

    @property
    def backend(self) -> ArchiveBackends:
        return self._config.backend

    @property
    def datastore(self) -> str:
        return self._config.datastore

    @asynccontextmanager
    async def _backend(self) -> AsyncIterator[ArchiveBackend]:
        """Provide a backend for one operation according to the connection policy."""
        if self._config.connection_policy is ConnectionPolicy.POOLED:
            if self._pooled_backend is None:
                self._pooled_backend = self._backend_factory(self._config)
            yield self._pooled_backend
            return

        async with self._backend_factory(self._config) as backend:
            yield backend

    async def create(self, record_type: ArchiveRecordType, record: Record) -> str:
        """Persist a new archive record of the given type.

        Args:
            record_type: Category of the record
            record: Pydantic model or mapping to archive

        Returns:
            Backend-generated unique identifier of the new record

        Raises:
            ArchiveError: If configuration, connection, serialisation or the
                write fails. The error carries a "Creating new ... record"
                context annotation.

        """
        try:
            async with self._backend() as backend:
                return await backend.create(record_type, record)
        except ArchiveError as e:
            raise e.with_context(
                f"Creating new {self.backend.display_name} record"
            ) from e

    async def find_all[T: BaseModel](
        self,
        record_type: ArchiveRecordType,
        model: type[T],
        filter: Mapping[str, Any] | None = None,
    ) -> list[T]:
        """Retrieve all archive records of the given type.

        Args:
            record_type: Category of records to retrieve
            model: Pydantic model class to deserialise each record into.
                Must match the shape the records were created with.
            filter: Optional equality filter on record fields. None returns
                every record of the type.

        Returns:
            All matching records, in backend-defined order. Empty if none
            are stored.

        Raises:
            ArchiveError: If connection, query or deserialisation fails. A
                single undecodable record fails the whole call; use
                ``find_all_partial`` to collect what can be decoded.

        """
        try:
            async with self._backend() as backend:
                return await backend.find_all(record_type, model, filter)
        except ArchiveError as e:
            raise e.with_context(
                f"Retrieving {self.backend.display_name} records"
            ) from e

    async def find_all_partial[T: BaseModel](
        self,
        record_type: ArchiveRecordType,
        model: type[T],
        filter: Mapping[str, Any] | None = None,
    ) -> PartialFindResult[T]:
        """Retrieve all decodable records of the given type and report the rest.

        Raises:
            ArchiveError: If connection or the query fails.

        """
        try:
            async with self._backend() as backend:
                return await backend.find_all_partial(record_type, model, filter)
        except ArchiveError as e:
            raise e.with_context(
                f"Retrieving {self.backend.display_name} records"
            ) from e

    async def close(self) -> None:
        """Release the pooled backend, if any. No-op for per-call connections."""
        if self._pooled_backend is None:
            return

        backend, self._pooled_backend = self._pooled_backend, None
        await backend.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def describe(self, redact: bool = True) -> str:
        """Summarise the store configuration for diagnostics.

        Credentials in the URI are masked unless ``redact=False`` is passed.
        """
        return self._config.describe(redact=redact)

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"ArchiveStore({self.describe()})"
