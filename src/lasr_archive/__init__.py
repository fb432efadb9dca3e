"""Archival persistence facade for account and transaction records."""

__version__ = "0.1.0"

from lasr_archive.backends import (
    ACCOUNT_COLLECTION,
    TRANSACTION_COLLECTION,
    ArchiveBackend,
    InMemoryBackend,
    MongoDBBackend,
)
from lasr_archive.builder import ArchiveStoreBuilder
from lasr_archive.configuration import ArchiveStoreConfiguration
from lasr_archive.errors import (
    ArchiveBackendError,
    ArchiveConfigError,
    ArchiveConnectionError,
    ArchiveError,
    ArchiveQueryError,
    ArchiveRecordTypeError,
    ArchiveSerializationError,
    ArchiveWriteError,
)
from lasr_archive.factory import create_backend
from lasr_archive.models import PartialFindResult, RecordDecodeFailure
from lasr_archive.store import ArchiveStore
from lasr_archive.types import ArchiveBackends, ArchiveRecordType, ConnectionPolicy

__all__ = [
    "ACCOUNT_COLLECTION",
    "TRANSACTION_COLLECTION",
    "ArchiveBackend",
    "ArchiveBackendError",
    "ArchiveBackends",
    "ArchiveConfigError",
    "ArchiveConnectionError",
    "ArchiveError",
    "ArchiveQueryError",
    "ArchiveRecordType",
    "ArchiveRecordTypeError",
    "ArchiveSerializationError",
    "ArchiveStore",
    "ArchiveStoreBuilder",
    "ArchiveStoreConfiguration",
    "ArchiveWriteError",
    "ConnectionPolicy",
    "InMemoryBackend",
    "MongoDBBackend",
    "PartialFindResult",
    "RecordDecodeFailure",
    "create_backend",
]
