"""Enumerations shared by the archive store and its backends."""

from enum import Enum


class ArchiveBackends(str, Enum):
    """Supported archive backends.

    Every member needs a matching adapter in ``lasr_archive.factory``.
    """

    MONGODB = "mongodb"
    MEMORY = "memory"

    @property
    def display_name(self) -> str:
        """Human-readable backend name."""
        match self:
            case ArchiveBackends.MONGODB:
                return "MongoDB"
            case ArchiveBackends.MEMORY:
                return "Memory"

    def __str__(self) -> str:
        return self.display_name


class ArchiveRecordType(str, Enum):
    """Categories of record that can be archived.

    Records are opaque to the store. The type only decides where a record
    is kept, so that each category can be stored, indexed and retained
    separately.
    """

    ACCOUNT = "account"
    TRANSACTION_BATCH = "transaction_batch"


class ConnectionPolicy(str, Enum):
    """How a store manages backend connections across operations."""

    PER_CALL = "per_call"
    """Open a fresh backend client for every operation and release it afterwards."""

    POOLED = "pooled"
    """Hold one backend client for the lifetime of the store, until ``close()``."""
