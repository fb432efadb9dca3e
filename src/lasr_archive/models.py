"""Result types returned by archive queries."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RecordDecodeFailure:
    """A stored record that could not be decoded into the requested model."""

    record_id: str
    """Backend identifier of the record."""

    error: str
    """Why decoding failed."""


@dataclass
class PartialFindResult[T]:
    """Records that decoded successfully, plus the ones that did not."""

    records: list[T] = field(default_factory=list)
    failures: list[RecordDecodeFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True if every stored record was decoded."""
        return not self.failures
