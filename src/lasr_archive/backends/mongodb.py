"""MongoDB archive backend.

Stores each ArchiveRecordType in its own collection (see
``ACCOUNT_COLLECTION`` and ``TRANSACTION_COLLECTION``) inside the database
named by the store's datastore.

The backend opens its client lazily and keeps it until ``close()``. With the
store's per-call connection policy a fresh backend, and therefore a fresh
client, is used for every operation. Pooling, reconnection and retries of
dropped connections are left to the driver.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, ClassVar, override

from bson.errors import InvalidDocument
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import (
    ConfigurationError,
    ConnectionFailure,
    InvalidName,
    PyMongoError,
)

from lasr_archive.backends.base import ArchiveBackend, Document
from lasr_archive.errors import (
    ArchiveConfigError,
    ArchiveConnectionError,
    ArchiveQueryError,
    ArchiveSerializationError,
    ArchiveWriteError,
)
from lasr_archive.types import ArchiveBackends
from lasr_archive.utils import redact_uri

logger = logging.getLogger(__name__)


class MongoDBBackend(ArchiveBackend):
    """Archive backend that uses MongoDB through the async pymongo driver."""

    kind: ClassVar[ArchiveBackends] = ArchiveBackends.MONGODB

    def __init__(
        self,
        uri: str,
        datastore: str,
        server_selection_timeout_ms: int | None = None,
    ) -> None:
        """Initialise MongoDB backend.

        No connection is made until the first operation.

        Args:
            uri: MongoDB connection URI (``mongodb://`` or ``mongodb+srv://``)
            datastore: Name of the MongoDB database to archive to and from
            server_selection_timeout_ms: Optional driver server selection timeout

        """
        super().__init__(uri, datastore)
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._client: AsyncMongoClient[Document] | None = None
        self._verified = False

    def _client_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self._server_selection_timeout_ms is not None:
            options["serverSelectionTimeoutMS"] = self._server_selection_timeout_ms
        return options

    async def _get_client(self) -> AsyncMongoClient[Document]:
        """Return a connected client, creating it on first use.

        Raises:
            ArchiveConnectionError: If the URI cannot be parsed (phase ``parse``)
                or no server answers a ping (phase ``connect``).

        """
        if self._client is None:
            try:
                self._client = AsyncMongoClient(self._uri, **self._client_options())
            except (ConfigurationError, ValueError, TypeError) as e:
                raise ArchiveConnectionError(
                    f"Failed to parse MongoDB URI '{redact_uri(self._uri)}': {e}",
                    phase="parse",
                ) from e
            logger.info(f"Opened MongoDB client for {redact_uri(self._uri)}")

        if not self._verified:
            try:
                await self._client.admin.command("ping")
            except PyMongoError as e:
                raise ArchiveConnectionError(
                    f"Failed to connect to MongoDB at '{redact_uri(self._uri)}': {e}",
                    phase="connect",
                ) from e
            self._verified = True

        return self._client

    async def _get_collection(self, collection: str) -> AsyncCollection[Document]:
        client = await self._get_client()
        try:
            return client.get_database(self._datastore).get_collection(collection)
        except InvalidName as e:
            raise ArchiveConfigError(
                f"Invalid MongoDB datastore '{self._datastore}': {e}"
            ) from e

    @override
    async def _insert_document(self, collection: str, document: Document) -> str:
        """Insert the document and return the driver-issued ObjectId as a string.

        The driver adds ``_id`` to the dict it is given; ``document`` is
        already a private copy made by ``serialise_record``.
        """
        handle = await self._get_collection(collection)

        try:
            result = await handle.insert_one(document)
        except InvalidDocument as e:
            raise ArchiveSerializationError(
                f"Failed to encode document for '{collection}': {e}",
                phase="serialize",
            ) from e
        except ConnectionFailure as e:
            raise ArchiveConnectionError(
                f"Lost connection to MongoDB while inserting into '{collection}': {e}",
                phase="connect",
            ) from e
        except PyMongoError as e:
            raise ArchiveWriteError(
                f"Failed to insert document into '{collection}': {e}",
                phase="insert",
            ) from e

        inserted_id = str(result.inserted_id)
        logger.debug(f"Inserted {inserted_id} into '{self._datastore}.{collection}'")
        return inserted_id

    @override
    async def _fetch_documents(
        self, collection: str, filter: Mapping[str, Any] | None
    ) -> list[Document]:
        """Query the collection; an absent filter selects every document."""
        handle = await self._get_collection(collection)
        query: Document = dict(filter) if filter else {}

        try:
            documents = await handle.find(query).to_list()
        except ConnectionFailure as e:
            raise ArchiveConnectionError(
                f"Lost connection to MongoDB while querying '{collection}': {e}",
                phase="connect",
            ) from e
        except PyMongoError as e:
            raise ArchiveQueryError(
                f"Failed to find documents in '{collection}': {e}",
                phase="query",
            ) from e

        logger.debug(
            f"Found {len(documents)} documents in '{self._datastore}.{collection}'"
        )
        return documents

    @override
    async def close(self) -> None:
        """Close the MongoDB client if one was opened."""
        if self._client is None:
            return

        client, self._client = self._client, None
        self._verified = False
        await client.close()
        logger.info(f"Closed MongoDB client for {redact_uri(self._uri)}")
