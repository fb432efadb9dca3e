"""Archive backends.

This package contains the ArchiveBackend interface and its implementations
for the supported storage engines.
"""

from lasr_archive.backends.base import (
    ACCOUNT_COLLECTION,
    TRANSACTION_COLLECTION,
    ArchiveBackend,
    Record,
    resolve_collection,
)
from lasr_archive.backends.in_memory import InMemoryBackend
from lasr_archive.backends.mongodb import MongoDBBackend

__all__ = [
    "ACCOUNT_COLLECTION",
    "TRANSACTION_COLLECTION",
    "ArchiveBackend",
    "InMemoryBackend",
    "MongoDBBackend",
    "Record",
    "resolve_collection",
]
