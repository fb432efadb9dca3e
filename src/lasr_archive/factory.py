"""Archive backend factory.

Selects the backend implementation for a configuration. The match over
ArchiveBackends is exhaustive: a new member without an arm here fails type
checking at the ``assert_never`` call.
"""

from __future__ import annotations

import logging
from typing import assert_never

from lasr_archive.backends.base import ArchiveBackend
from lasr_archive.backends.in_memory import InMemoryBackend
from lasr_archive.backends.mongodb import MongoDBBackend
from lasr_archive.configuration import ArchiveStoreConfiguration
from lasr_archive.types import ArchiveBackends

logger = logging.getLogger(__name__)


def create_backend(config: ArchiveStoreConfiguration) -> ArchiveBackend:
    """Create an archive backend instance for the configured backend.

    Args:
        config: Validated archive store configuration

    Returns:
        A new, unconnected backend bound to the configured URI and datastore

    """
    logger.debug(f"Creating {config.backend.display_name} archive backend")

    match config.backend:
        case ArchiveBackends.MONGODB:
            return MongoDBBackend(
                uri=config.uri,
                datastore=config.datastore,
                server_selection_timeout_ms=config.server_selection_timeout_ms,
            )
        case ArchiveBackends.MEMORY:
            return InMemoryBackend(uri=config.uri, datastore=config.datastore)
        case _:
            assert_never(config.backend)
