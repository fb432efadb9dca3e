"""Error classes for the archive store.

This module provides:
- ArchiveError: Base exception class for all archive errors
- ArchiveConfigError: Missing or invalid store configuration
- ArchiveBackendError: Base exception for backend failures, tagged with a phase
- ArchiveConnectionError, ArchiveWriteError, ArchiveQueryError,
  ArchiveSerializationError, ArchiveRecordTypeError: Backend failures
"""

from __future__ import annotations

from typing import Self


class ArchiveError(Exception):
    """Base exception for all archive errors.

    Errors carry a chain of context annotations, outermost first. The
    rendered message joins the chain and the underlying message with ": ".
    """

    def __init__(self, message: str, *, context: tuple[str, ...] = ()) -> None:
        """Initialise error with a message and optional context chain.

        Args:
            message: Description of the underlying failure
            context: Context annotations added by callers, outermost first

        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return ": ".join((*self.context, self.message))

    def _clone_kwargs(self) -> dict[str, object]:
        return {}

    def with_context(self, context: str) -> Self:
        """Return a copy of this error with an extra outer context annotation.

        The copy has the same class, so callers can still catch specific
        failures after the store has annotated them.
        """
        return type(self)(
            self.message, context=(context, *self.context), **self._clone_kwargs()
        )


class ArchiveConfigError(ArchiveError):
    """Raised when archive store configuration is missing or invalid."""

    pass


class ArchiveBackendError(ArchiveError):
    """Base exception for archive backend failures.

    The phase identifies the step that failed: parse, connect, resolve,
    serialize, insert, query or deserialize.
    """

    def __init__(
        self, message: str, *, phase: str, context: tuple[str, ...] = ()
    ) -> None:
        super().__init__(message, context=context)
        self.phase = phase

    def _clone_kwargs(self) -> dict[str, object]:
        return {"phase": self.phase}


class ArchiveConnectionError(ArchiveBackendError):
    """Raised when the backend URI cannot be parsed or the backend is unreachable."""

    pass


class ArchiveWriteError(ArchiveBackendError):
    """Raised when a record cannot be written to the backend."""

    pass


class ArchiveQueryError(ArchiveBackendError):
    """Raised when records cannot be queried from the backend."""

    pass


class ArchiveSerializationError(ArchiveBackendError):
    """Raised when a record cannot be encoded for or decoded from the backend."""

    pass


class ArchiveRecordTypeError(ArchiveBackendError):
    """Raised when a record type has no storage location in the backend."""

    pass
