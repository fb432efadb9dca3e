"""Configuration for the archive store.

Configuration supports both explicit instantiation and environment variable
fallback for zero-config scenarios.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lasr_archive.errors import ArchiveConfigError
from lasr_archive.types import ArchiveBackends, ConnectionPolicy
from lasr_archive.utils import redact_uri

# Property name -> environment variable used when the property is absent
_ENV_FALLBACKS = {
    "uri": "ARCHIVE_STORE_URI",
    "backend": "ARCHIVE_STORE_BACKEND",
    "datastore": "ARCHIVE_STORE_DATASTORE",
    "connection_policy": "ARCHIVE_STORE_CONNECTION_POLICY",
}


class ArchiveStoreConfiguration(BaseModel):
    """Validated configuration for an ArchiveStore.

    Only presence is checked for ``uri`` and ``datastore``. A malformed or
    empty URI is reported by the backend on the first connection attempt,
    not here.

    Attributes:
        uri: Backend-specific connection string
        backend: Archive backend to use
        datastore: Name of the logical database to archive to and from
        connection_policy: Per-call or pooled backend connections
        server_selection_timeout_ms: Optional driver timeout for finding a server

    Example:
        ```python
        # Explicit configuration
        config = ArchiveStoreConfiguration(
            uri="mongodb://localhost:27017",
            backend=ArchiveBackends.MONGODB,
            datastore="lasr_archive",
        )

        # From properties dict with env fallback
        config = ArchiveStoreConfiguration.from_properties({
            "datastore": "lasr_archive"
        })
        ```

    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
    )

    uri: str = Field(description="Backend connection URI")
    backend: ArchiveBackends = Field(description="Archive backend to use")
    datastore: str = Field(description="Name of the archive datastore")
    connection_policy: ConnectionPolicy = Field(
        default=ConnectionPolicy.PER_CALL,
        description="Whether each operation opens its own backend connection",
    )
    server_selection_timeout_ms: int | None = Field(
        default=None,
        description="Driver server selection timeout in milliseconds",
        gt=0,
    )

    @field_validator("backend", "connection_policy", mode="before")
    @classmethod
    def normalise_enum_value(cls, v: Any) -> Any:
        """Accept enum values case-insensitively, e.g. "MongoDB" for "mongodb"."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from properties with environment fallback.

        Layered configuration:
        1. Explicit properties (highest priority)
        2. Environment variables (fallback)
        3. Defaults (lowest priority)

        Environment variables used:
        - ARCHIVE_STORE_URI
        - ARCHIVE_STORE_BACKEND
        - ARCHIVE_STORE_DATASTORE
        - ARCHIVE_STORE_CONNECTION_POLICY

        Args:
            properties: Configuration properties dictionary

        Returns:
            Validated configuration instance

        Raises:
            ArchiveConfigError: If a required field is missing or invalid

        """
        config_data = properties.copy()

        for name, env_var in _ENV_FALLBACKS.items():
            if config_data.get(name) is None and env_var in os.environ:
                config_data[name] = os.environ[env_var]

        return cls.validate_properties(config_data)

    @classmethod
    def validate_properties(cls, config_data: dict[str, Any]) -> Self:
        """Validate properties, converting pydantic errors to ArchiveConfigError."""
        missing = [
            name
            for name in ("uri", "backend", "datastore")
            if config_data.get(name) is None
        ]
        if missing:
            raise ArchiveConfigError(
                f"Archive store requires {', '.join(missing)} to be set"
            )

        try:
            return cls.model_validate(config_data)
        except ValidationError as e:
            raise ArchiveConfigError(
                f"Invalid archive store configuration: {e}"
            ) from e

    def describe(self, redact: bool = True) -> str:
        """Summarise the configuration for diagnostics.

        Args:
            redact: Mask credentials in the URI. Pass False only when the
                output will not reach logs or users.

        Returns:
            Summary in the form ``URI: ..., Backend: ..., Datastore: ...``

        """
        uri = redact_uri(self.uri) if redact else self.uri
        return (
            f"URI: {uri}, Backend: {self.backend.display_name}, "
            f"Datastore: {self.datastore}"
        )

    def __repr_args__(self) -> Iterator[tuple[str | None, Any]]:
        for name, value in super().__repr_args__():
            if name == "uri" and isinstance(value, str):
                value = redact_uri(value)
            yield name, value
