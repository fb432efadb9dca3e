"""Archive backend interface.

This module defines the abstract base class that every archive backend
implements. The base class owns the parts of the contract that do not
depend on the storage engine:

- Mapping of record types to collection names
- Serialisation of records before they are written
- Deserialisation of stored documents into caller-supplied models

Backends only provide raw document insert and fetch, plus resource release.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import TracebackType
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from lasr_archive.errors import ArchiveRecordTypeError, ArchiveSerializationError
from lasr_archive.models import PartialFindResult, RecordDecodeFailure
from lasr_archive.types import ArchiveBackends, ArchiveRecordType

logger = logging.getLogger(__name__)

# Type alias for stored documents (schemaless by design)
Document = dict[str, Any]

# A record is either a pydantic model or a plain mapping of field values
Record = BaseModel | Mapping[str, Any]

ACCOUNT_COLLECTION = "accounts"
"""Collection name for storing account data."""

TRANSACTION_COLLECTION = "transaction_data"
"""Collection name for storing transaction data."""

_RECORD_COLLECTIONS: dict[ArchiveRecordType, str] = {
    ArchiveRecordType.ACCOUNT: ACCOUNT_COLLECTION,
    ArchiveRecordType.TRANSACTION_BATCH: TRANSACTION_COLLECTION,
}

ID_FIELD = "_id"


def resolve_collection(record_type: ArchiveRecordType) -> str:
    """Return the collection name that stores records of the given type.

    Raises:
        ArchiveRecordTypeError: If the record type has no collection.

    """
    try:
        return _RECORD_COLLECTIONS[record_type]
    except (KeyError, TypeError) as e:
        raise ArchiveRecordTypeError(
            f"Invalid archive record type: {record_type!r}", phase="resolve"
        ) from e


def serialise_record(record: Record) -> Document:
    """Convert a record into a new document dict.

    Pydantic models are dumped in JSON mode using field aliases, the same
    keys that ``model_validate`` reads back. Values are stored as their JSON
    form, so ``datetime`` and ``Decimal`` become strings rather than BSON
    dates or decimals. Mappings are shallow-copied; the caller's object is
    never modified.

    Raises:
        ArchiveSerializationError: If the record cannot be serialised.

    """
    if isinstance(record, BaseModel):
        try:
            return record.model_dump(mode="json", by_alias=True)
        except PydanticSerializationError as e:
            raise ArchiveSerializationError(
                f"Failed to serialise {type(record).__name__}: {e}",
                phase="serialize",
            ) from e

    if isinstance(record, Mapping):
        return dict(record)

    raise ArchiveSerializationError(
        f"Cannot archive record of type {type(record).__name__}; "
        "expected a pydantic model or a mapping",
        phase="serialize",
    )


class ArchiveBackend(ABC):
    """Abstract base class for archive backend implementations.

    A backend is bound to one connection URI and one datastore (logical
    database). Within the datastore each ArchiveRecordType is kept in its
    own collection.

    Backends acquire their resources lazily and release them in ``close()``.
    They can be used as async context managers.
    """

    kind: ClassVar[ArchiveBackends]

    def __init__(self, uri: str, datastore: str) -> None:
        """Initialise backend.

        Args:
            uri: Backend-specific connection URI
            datastore: Name of the logical database to archive to and from

        """
        self._uri = uri
        self._datastore = datastore

    @property
    def uri(self) -> str:
        """The connection URI this backend is bound to."""
        return self._uri

    @property
    def datastore(self) -> str:
        """The datastore this backend reads and writes."""
        return self._datastore

    async def create(self, record_type: ArchiveRecordType, record: Record) -> str:
        """Persist a new record and return its backend-generated identifier.

        Args:
            record_type: Category of the record, decides the collection
            record: Pydantic model or mapping to store

        Returns:
            Unique identifier of the stored record, as a string

        Raises:
            ArchiveBackendError: If any step of the write fails

        """
        collection = resolve_collection(record_type)
        document = serialise_record(record)
        return await self._insert_document(collection, document)

    async def find_all[T: BaseModel](
        self,
        record_type: ArchiveRecordType,
        model: type[T],
        filter: Mapping[str, Any] | None = None,
    ) -> list[T]:
        """Return all records of a type, deserialised into ``model``.

        Args:
            record_type: Category of records to return
            model: Pydantic model class each stored document is validated into
            filter: Optional equality filter. None returns every record of
                the type.

        Returns:
            Deserialised records in backend-defined order

        Raises:
            ArchiveBackendError: If the query fails or any document cannot be
                deserialised. Records decoded before the failure are discarded.

        """
        documents = await self._fetch_documents(
            resolve_collection(record_type), filter
        )
        return [self._decode(document, model) for document in documents]

    async def find_all_partial[T: BaseModel](
        self,
        record_type: ArchiveRecordType,
        model: type[T],
        filter: Mapping[str, Any] | None = None,
    ) -> PartialFindResult[T]:
        """Return all decodable records of a type plus per-record failures.

        Unlike ``find_all``, a document that does not match ``model`` does not
        abort the call. It is reported in ``failures`` instead.

        Raises:
            ArchiveBackendError: If the query itself fails

        """
        documents = await self._fetch_documents(
            resolve_collection(record_type), filter
        )

        result: PartialFindResult[T] = PartialFindResult()
        for document in documents:
            try:
                record = self._decode(document, model)
            except ArchiveSerializationError as e:
                record_id = str(document.get(ID_FIELD, ""))
                logger.warning(f"Skipping undecodable record {record_id}: {e}")
                result.failures.append(
                    RecordDecodeFailure(record_id=record_id, error=str(e))
                )
                continue
            result.records.append(record)
        return result

    def _decode[T: BaseModel](self, document: Document, model: type[T]) -> T:
        """Validate a stored document into ``model``, dropping the identifier field."""
        fields = dict(document)
        record_id = str(fields.pop(ID_FIELD, ""))
        try:
            return model.model_validate(fields)
        except ValidationError as e:
            raise ArchiveSerializationError(
                f"Failed to deserialise record {record_id} into {model.__name__}: {e}",
                phase="deserialize",
            ) from e

    @abstractmethod
    async def _insert_document(self, collection: str, document: Document) -> str:
        """Insert one document into a collection and return its identifier."""
        ...

    @abstractmethod
    async def _fetch_documents(
        self, collection: str, filter: Mapping[str, Any] | None
    ) -> list[Document]:
        """Fetch all documents of a collection that match the filter."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any resources held by the backend.

        Safe to call more than once.
        """
        ...

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
