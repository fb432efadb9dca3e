"""Tests for ArchiveStoreBuilder."""

import pytest

from lasr_archive.builder import ArchiveStoreBuilder
from lasr_archive.errors import ArchiveConfigError
from lasr_archive.store import ArchiveStore
from lasr_archive.types import ArchiveBackends, ConnectionPolicy


class TestArchiveStoreBuilder:
    """Tests for building stores from individual fields."""

    def test_builds_store_from_required_fields(self) -> None:
        store = (
            ArchiveStoreBuilder()
            .uri("mongodb://localhost:27017")
            .backend(ArchiveBackends.MONGODB)
            .datastore("lasr_archive")
            .build()
        )

        assert isinstance(store, ArchiveStore)
        assert store.uri == "mongodb://localhost:27017"
        assert store.backend is ArchiveBackends.MONGODB
        assert store.datastore == "lasr_archive"
        assert store.configuration.connection_policy is ConnectionPolicy.PER_CALL

    def test_accepts_backend_by_value(self) -> None:
        store = (
            ArchiveStoreBuilder()
            .uri("memory://")
            .backend("memory")
            .datastore("lasr_archive")
            .build()
        )

        assert store.backend is ArchiveBackends.MEMORY

    def test_sets_optional_fields(self) -> None:
        store = (
            ArchiveStoreBuilder()
            .uri("mongodb://localhost:27017")
            .backend(ArchiveBackends.MONGODB)
            .datastore("lasr_archive")
            .connection_policy(ConnectionPolicy.POOLED)
            .server_selection_timeout_ms(500)
            .build()
        )

        assert store.configuration.connection_policy is ConnectionPolicy.POOLED
        assert store.configuration.server_selection_timeout_ms == 500

    def test_empty_uri_is_not_rejected_at_build_time(self) -> None:
        store = (
            ArchiveStoreBuilder()
            .uri("")
            .backend(ArchiveBackends.MONGODB)
            .datastore("lasr_archive")
            .build()
        )

        assert store.uri == ""

    def test_raises_error_naming_missing_fields(self) -> None:
        builder = ArchiveStoreBuilder().uri("mongodb://localhost:27017")

        with pytest.raises(ArchiveConfigError, match="backend, datastore"):
            builder.build()

    def test_raises_error_for_unknown_backend(self) -> None:
        builder = (
            ArchiveStoreBuilder()
            .uri("mongodb://localhost:27017")
            .backend("postgres")
            .datastore("lasr_archive")
        )

        with pytest.raises(ArchiveConfigError):
            builder.build()

    def test_builder_ignores_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARCHIVE_STORE_DATASTORE", "env_archive")
        builder = ArchiveStoreBuilder().uri("memory://").backend("memory")

        with pytest.raises(ArchiveConfigError, match="datastore"):
            builder.build()
