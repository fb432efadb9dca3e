"""In-memory archive backend.

Provides an in-memory implementation of the ArchiveBackend interface for
testing and ephemeral runs without a database server.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, ClassVar, override

from bson import ObjectId

from lasr_archive.backends.base import ID_FIELD, ArchiveBackend, Document
from lasr_archive.errors import ArchiveSerializationError, ArchiveWriteError
from lasr_archive.types import ArchiveBackends

logger = logging.getLogger(__name__)


class InMemoryBackend(ArchiveBackend):
    """In-memory archive backend.

    Documents live in a class-level registry keyed by (uri, datastore), so a
    fresh backend instance created for each call sees the records written
    by earlier instances in the same process. No thread safety is needed
    since asyncio runs in a single thread.

    Identifiers are ObjectId strings, matching the MongoDB backend. As with
    MongoDB, a caller-supplied ``_id`` is kept and must be unique within the
    collection.
    """

    kind: ClassVar[ArchiveBackends] = ArchiveBackends.MEMORY

    # Storage: (uri, datastore) -> collection -> documents
    _datastores: ClassVar[dict[tuple[str, str], dict[str, list[Document]]]] = {}

    @classmethod
    def reset(cls) -> None:
        """Discard every datastore held in memory."""
        cls._datastores.clear()

    def _get_collection(self, collection: str) -> list[Document]:
        """Get or create the document list for a collection."""
        datastore = self._datastores.setdefault((self._uri, self._datastore), {})
        return datastore.setdefault(collection, [])

    @override
    async def _insert_document(self, collection: str, document: Document) -> str:
        non_string_keys = [key for key in document if not isinstance(key, str)]
        if non_string_keys:
            raise ArchiveSerializationError(
                f"Document keys must be strings, got {non_string_keys!r}",
                phase="serialize",
            )

        documents = self._get_collection(collection)
        stored = copy.deepcopy(document)
        inserted_id = stored.setdefault(ID_FIELD, ObjectId())
        if any(existing[ID_FIELD] == inserted_id for existing in documents):
            raise ArchiveWriteError(
                f"Duplicate key {inserted_id!r} in '{collection}'",
                phase="insert",
            )
        documents.append(stored)

        logger.debug(f"Inserted {inserted_id} into '{self._datastore}.{collection}'")
        return str(inserted_id)

    @override
    async def _fetch_documents(
        self, collection: str, filter: Mapping[str, Any] | None
    ) -> list[Document]:
        """Return copies of matching documents.

        Filters support top-level equality matching only.
        """
        criteria = dict(filter) if filter else {}
        return [
            copy.deepcopy(document)
            for document in self._get_collection(collection)
            if all(
                key in document and document[key] == value
                for key, value in criteria.items()
            )
        ]

    @override
    async def close(self) -> None:
        """No-op; stored documents outlive the backend instance."""
        pass
