"""Integration tests against the real MongoDB driver.

Tests marked ``integration`` need a running MongoDB and are skipped unless
LASR_ARCHIVE_TEST_MONGODB_URI is set. The unreachable-server tests only need
the driver itself.
"""

import os
import uuid
from collections.abc import AsyncGenerator

import pytest
from pydantic import BaseModel
from pymongo import AsyncMongoClient

from lasr_archive import (
    ArchiveBackends,
    ArchiveConnectionError,
    ArchiveRecordType,
    ArchiveStore,
    ArchiveStoreBuilder,
    ConnectionPolicy,
)

MONGODB_URI_ENV_VAR = "LASR_ARCHIVE_TEST_MONGODB_URI"


class TestDocument(BaseModel):
    __test__ = False

    thing: str
    otherthing: str


class TestUnreachableMongoDB:
    """Connection failures surface as errors, never as empty results."""

    async def test_empty_uri_raises_connection_error(self) -> None:
        store = (
            ArchiveStoreBuilder()
            .uri("")
            .backend(ArchiveBackends.MONGODB)
            .datastore("lasr_archive_test")
            .server_selection_timeout_ms(200)
            .build()
        )

        with pytest.raises(ArchiveConnectionError) as exc_info:
            await store.create(
                ArchiveRecordType.ACCOUNT, TestDocument(thing="a", otherthing="b")
            )

        assert exc_info.value.phase in ("parse", "connect")

    async def test_unreachable_server_raises_connect_phase_error(self) -> None:
        store = (
            ArchiveStoreBuilder()
            .uri("mongodb://127.0.0.1:1")
            .backend(ArchiveBackends.MONGODB)
            .datastore("lasr_archive_test")
            .server_selection_timeout_ms(200)
            .build()
        )

        with pytest.raises(ArchiveConnectionError) as exc_info:
            await store.find_all(ArchiveRecordType.ACCOUNT, TestDocument)

        assert exc_info.value.phase == "connect"


@pytest.mark.integration
class TestMongoDBArchiveStore:
    """Round trips against a live MongoDB server."""

    @pytest.fixture
    async def datastore(self) -> AsyncGenerator[str, None]:
        """Provide a unique database name and drop it afterwards."""
        uri = os.environ.get(MONGODB_URI_ENV_VAR)
        if not uri:
            pytest.skip(f"{MONGODB_URI_ENV_VAR} not set")

        name = f"lasr_archive_test_{uuid.uuid4().hex[:8]}"
        yield name

        client: AsyncMongoClient[dict[str, object]] = AsyncMongoClient(uri)
        try:
            await client.drop_database(name)
        finally:
            await client.close()

    def make_store(
        self, datastore: str, policy: ConnectionPolicy = ConnectionPolicy.PER_CALL
    ) -> ArchiveStore:
        return (
            ArchiveStoreBuilder()
            .uri(os.environ[MONGODB_URI_ENV_VAR])
            .backend(ArchiveBackends.MONGODB)
            .datastore(datastore)
            .connection_policy(policy)
            .server_selection_timeout_ms(5000)
            .build()
        )

    async def test_create_then_find_all_returns_record(self, datastore: str) -> None:
        store = self.make_store(datastore)

        record_id = await store.create(
            ArchiveRecordType.ACCOUNT, TestDocument(thing="a", otherthing="b")
        )
        found = await store.find_all(ArchiveRecordType.ACCOUNT, TestDocument)

        assert record_id
        assert found == [TestDocument(thing="a", otherthing="b")]

    async def test_record_types_do_not_leak(self, datastore: str) -> None:
        store = self.make_store(datastore)

        await store.create(
            ArchiveRecordType.ACCOUNT, TestDocument(thing="a", otherthing="b")
        )

        assert await store.find_all(
            ArchiveRecordType.TRANSACTION_BATCH, TestDocument
        ) == []

    async def test_pooled_store_issues_distinct_identifiers(
        self, datastore: str
    ) -> None:
        async with self.make_store(datastore, ConnectionPolicy.POOLED) as store:
            document = TestDocument(thing="a", otherthing="b")
            first_id = await store.create(ArchiveRecordType.ACCOUNT, document)
            second_id = await store.create(ArchiveRecordType.ACCOUNT, document)

            assert first_id != second_id
            assert len(await store.find_all(ArchiveRecordType.ACCOUNT, TestDocument)) == 2
