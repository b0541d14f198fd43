"""MongoDB adapter implementing Casbin's asyncio adapter interface.

This adapter persists Casbin policy rules in the ``casbin_rule`` collection,
one document per rule (ptype, v0..v5). It is what ``casbin.AsyncEnforcer``
calls at startup (load_policy) and on policy mutation (add/remove/save).

Architecture:
- Subclasses casbin's AsyncAdapter (casbin calls it directly)
- Maps PyMongoError to PolicyStoreError subclasses and raises them
- Every network call is bounded with pymongo.timeout
- Connection ownership is explicit; only owned clients are closed

Consistency:
    save_policy drops the collection and then bulk-inserts. It is not
    transactional: if the insert fails the collection stays empty. Concurrent
    callers are not serialized.

Usage:
    async with await MongoAdapter.from_url("mongodb://localhost:27017/authz") as adapter:
        enforcer = casbin.AsyncEnforcer("model.conf", adapter)
        await enforcer.load_policy()
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Sequence

import pymongo
from casbin.persist.adapters.asyncio import AsyncAdapter
from pydantic import ValidationError
from pymongo import ASCENDING, AsyncMongoClient, IndexModel
from pymongo.errors import OperationFailure, PyMongoError

from policy_store.core.config import Settings, get_settings
from policy_store.core.constants import (
    COLLECTION_NAME,
    INDEX_KEY_SPECS_CONFLICT_CODE,
    NAMESPACE_NOT_FOUND_CODE,
    RULE_FIELDS,
    SAVED_SECTIONS,
)
from policy_store.domain.casbin_rule import (
    CasbinRule,
    load_policy_line,
    save_policy_line,
)
from policy_store.domain.filters import build_field_filter, build_rule_filter
from policy_store.infrastructure.enums import InfrastructureErrorCode
from policy_store.infrastructure.errors import (
    PolicyDecodeError,
    PolicyQueryError,
    PolicyStoreConnectionError,
    PolicyStoreError,
)

if TYPE_CHECKING:
    from casbin.model import Model
    from pymongo.asynchronous.database import AsyncDatabase

    from policy_store.domain.protocols import LoggerProtocol


class ConnectionOwnership(Enum):
    """Who is responsible for closing the MongoDB client."""

    OWNED = "owned"
    BORROWED = "borrowed"


class MongoAdapter(AsyncAdapter):
    """MongoDB policy storage for casbin.AsyncEnforcer.

    Use the ``from_url`` or ``from_database`` factories; they prepare the
    collection indexes before returning.

    Attributes:
        _database: Database holding the policy collection.
        _collection: The ``casbin_rule`` collection.
        _client: Client to close on teardown (owned connections only).
        _ownership: OWNED when this adapter created the client.
        _settings: Timeouts and database defaults.
        _logger: Structured logger bound to the collection name.
    """

    def __init__(
        self,
        database: "AsyncDatabase[dict[str, Any]]",
        *,
        client: AsyncMongoClient | None = None,
        ownership: ConnectionOwnership = ConnectionOwnership.BORROWED,
        settings: Settings | None = None,
        logger: "LoggerProtocol | None" = None,
    ) -> None:
        """Initialize adapter state without any network call.

        Args:
            database: Database holding the policy collection.
            client: Client to release on close (OWNED only).
            ownership: Whether close() should release the client.
            settings: Settings (defaults to the cached settings).
            logger: Structured logger (defaults to the container logger).
        """
        if logger is None:
            from policy_store.core.container import get_logger

            logger = get_logger()

        self._database = database
        self._collection = database[COLLECTION_NAME]
        self._client = client
        self._ownership = ownership
        self._settings = settings or get_settings()
        self._logger = logger.bind(collection=COLLECTION_NAME)
        self._closed = False

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    async def from_url(
        cls,
        url: str,
        *,
        database: str | None = None,
        settings: Settings | None = None,
        logger: "LoggerProtocol | None" = None,
    ) -> "MongoAdapter":
        """Connect to MongoDB and open the policy collection.

        The database is ``database`` if given, else the one named in the URI,
        else ``settings.mongo_database``. The adapter owns the client and
        closes it in close().

        Args:
            url: MongoDB connection URI.
            database: Database name override.
            settings: Settings (defaults to the cached settings).
            logger: Structured logger.

        Returns:
            MongoAdapter: Connected adapter with indexes in place.

        Raises:
            PolicyStoreConnectionError: If the URI is invalid, connect or ping
                fails or times out, or index setup fails.
        """
        settings = settings or get_settings()
        timeout_ms = int(settings.connect_timeout_seconds * 1000)

        try:
            client: AsyncMongoClient = AsyncMongoClient(
                url,
                connectTimeoutMS=timeout_ms,
                serverSelectionTimeoutMS=timeout_ms,
            )
        except PyMongoError as e:
            raise PolicyStoreConnectionError(
                "Invalid MongoDB connection settings",
                code=InfrastructureErrorCode.DATABASE_CONNECTION_FAILED,
                details={"error": str(e)},
            ) from e

        db = (
            client[database]
            if database
            else client.get_default_database(default=settings.mongo_database)
        )
        adapter = cls(
            db,
            client=client,
            ownership=ConnectionOwnership.OWNED,
            settings=settings,
            logger=logger,
        )

        try:
            await adapter._connect()
            await adapter._prepare_collection()
        except PolicyStoreError:
            await adapter.close()
            raise

        return adapter

    @classmethod
    async def from_database(
        cls,
        database: "AsyncDatabase[dict[str, Any]]",
        *,
        settings: Settings | None = None,
        logger: "LoggerProtocol | None" = None,
    ) -> "MongoAdapter":
        """Open the policy collection on a caller-owned database handle.

        The adapter never closes the handle's client.

        Args:
            database: Existing database handle.
            settings: Settings (defaults to the cached settings).
            logger: Structured logger.

        Returns:
            MongoAdapter: Adapter with indexes in place.

        Raises:
            PolicyStoreConnectionError: If index setup fails.
        """
        adapter = cls(
            database,
            ownership=ConnectionOwnership.BORROWED,
            settings=settings,
            logger=logger,
        )
        await adapter._prepare_collection()
        return adapter

    async def _connect(self) -> None:
        """Connect and ping the primary, each bounded by the connect timeout."""
        assert self._client is not None
        bound = self._settings.connect_timeout_seconds
        try:
            with pymongo.timeout(bound):
                await self._client.aconnect()
            with pymongo.timeout(bound):
                await self._client.admin.command("ping")
        except PyMongoError as e:
            self._logger.error(
                "policy_store_connection_failed",
                error=e,
                database=self._database.name,
            )
            raise PolicyStoreConnectionError(
                "Failed to connect to MongoDB",
                code=(
                    InfrastructureErrorCode.DATABASE_TIMEOUT
                    if e.timeout
                    else InfrastructureErrorCode.DATABASE_CONNECTION_FAILED
                ),
                details={"database": self._database.name, "error": str(e)},
            ) from e

    async def _prepare_collection(self) -> None:
        """Create the per-field indexes during construction."""
        try:
            await self._create_indexes()
        except PyMongoError as e:
            self._logger.error("policy_index_setup_failed", error=e)
            raise PolicyStoreConnectionError(
                "Failed to create policy indexes",
                code=InfrastructureErrorCode.DATABASE_INDEX_FAILED,
                details={"error": str(e)},
            ) from e

        self._logger.info(
            "policy_store_opened",
            database=self._database.name,
            ownership=self._ownership.value,
        )

    async def _create_indexes(self) -> None:
        """Ensure one ascending single-field index per rule field.

        An index that already exists with different options (server code 86)
        is logged and tolerated so re-opening an existing collection works.

        Raises:
            PyMongoError: Any other index failure.
        """
        models = [
            IndexModel([(field, ASCENDING)], background=False)
            for field in RULE_FIELDS
        ]
        try:
            with self._bounded():
                await self._collection.create_indexes(models)
        except OperationFailure as e:
            if e.code != INDEX_KEY_SPECS_CONFLICT_CODE:
                raise
            self._logger.warning(
                "policy_index_conflict",
                infrastructure_code=InfrastructureErrorCode.DATABASE_INDEX_CONFLICT.value,
                error_message=str(e),
            )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def ownership(self) -> ConnectionOwnership:
        """Whether close() releases the client."""
        return self._ownership

    async def close(self) -> None:
        """Release the client if this adapter owns it.

        Safe to call more than once; the client is closed exactly once.
        Borrowed handles are left open for their owner.
        """
        if self._closed:
            return
        self._closed = True

        if self._ownership is ConnectionOwnership.OWNED and self._client is not None:
            await self._client.close()
            self._logger.info("policy_store_closed")

    async def __aenter__(self) -> "MongoAdapter":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # =========================================================================
    # Casbin adapter interface
    # =========================================================================

    async def load_policy(self, model: "Model") -> None:
        """Load every stored rule into the Casbin model.

        Iteration is bounded by ``load_timeout_seconds``. The cursor is
        closed on every exit path.

        Args:
            model: Casbin model to append rules into.

        Raises:
            PolicyDecodeError: If a stored document is not a valid rule.
            PolicyQueryError: If the find or cursor iteration fails.
        """
        loaded = 0
        skipped = 0
        cursor = self._collection.find({})
        try:
            with pymongo.timeout(self._settings.load_timeout_seconds):
                async for document in cursor:
                    rule = self._decode(document)
                    if load_policy_line(rule, model):
                        loaded += 1
                    else:
                        skipped += 1
                        self._logger.debug("policy_type_undeclared", ptype=rule.ptype)
        except PyMongoError as e:
            raise self._query_error("load_policy", e) from e
        finally:
            await cursor.close()

        self._logger.debug("policy_loaded", rule_count=loaded, skipped_count=skipped)

    async def save_policy(self, model: "Model") -> bool:
        """Replace all stored rules with the model's p and g sections.

        Drops the collection, restores its indexes, then bulk-inserts. A
        failed insert leaves the collection empty.

        Args:
            model: Casbin model to persist.

        Returns:
            bool: True once the rules are written.

        Raises:
            PolicyQueryError: If the drop, index rebuild or insert fails.
        """
        documents = [
            save_policy_line(ptype, rule).to_document()
            for section in SAVED_SECTIONS
            for ptype, assertion in (model.model.get(section) or {}).items()
            for rule in assertion.policy
        ]

        await self._drop_collection()

        try:
            await self._create_indexes()
            if documents:
                with self._bounded():
                    await self._collection.insert_many(documents)
        except PyMongoError as e:
            raise self._query_error("save_policy", e, rule_count=len(documents)) from e

        self._logger.debug("policy_saved", rule_count=len(documents))
        return True

    async def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Insert one rule.

        Args:
            sec: Section ("p" or "g"); unused, ptype decides placement.
            ptype: Rule type.
            rule: Rule values (truncated to six).

        Returns:
            bool: True once inserted.

        Raises:
            PolicyQueryError: If the insert fails.
        """
        document = save_policy_line(ptype, rule).to_document()
        try:
            with self._bounded():
                await self._collection.insert_one(document)
        except PyMongoError as e:
            raise self._query_error("add_policy", e, ptype=ptype) from e

        self._logger.debug("policy_added", ptype=ptype)
        return True

    async def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Delete at most one document exactly matching the encoded rule.

        Args:
            sec: Section; unused.
            ptype: Rule type.
            rule: Rule values; empty trailing slots must match too.

        Returns:
            bool: True if a document was deleted.

        Raises:
            PolicyQueryError: If the delete fails.
        """
        try:
            with self._bounded():
                result = await self._collection.delete_one(
                    build_rule_filter(ptype, rule)
                )
        except PyMongoError as e:
            raise self._query_error("remove_policy", e, ptype=ptype) from e

        self._logger.debug(
            "policy_removed", ptype=ptype, deleted_count=result.deleted_count
        )
        return result.deleted_count > 0

    async def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> bool:
        """Delete every rule of ``ptype`` matching the given slot values.

        ``field_values`` constrain slots ``field_index`` onwards; with no
        values every rule of the type is deleted.

        Args:
            sec: Section; unused.
            ptype: Rule type.
            field_index: Slot index of the first value.
            *field_values: Values for consecutive slots.

        Returns:
            bool: True if any document was deleted.

        Raises:
            PolicyQueryError: If the delete fails.
        """
        selector = build_field_filter(ptype, field_index, field_values)
        try:
            with self._bounded():
                result = await self._collection.delete_many(selector)
        except PyMongoError as e:
            raise self._query_error(
                "remove_filtered_policy", e, ptype=ptype, field_index=field_index
            ) from e

        self._logger.debug(
            "policy_filtered_removed",
            ptype=ptype,
            field_index=field_index,
            deleted_count=result.deleted_count,
        )
        return result.deleted_count > 0

    async def add_policies(
        self, sec: str, ptype: str, rules: Sequence[Sequence[str]]
    ) -> bool:
        """Insert several rules in one bulk insert.

        Raises:
            PolicyQueryError: If the insert fails.
        """
        documents = [save_policy_line(ptype, rule).to_document() for rule in rules]
        if not documents:
            return True
        try:
            with self._bounded():
                await self._collection.insert_many(documents)
        except PyMongoError as e:
            raise self._query_error(
                "add_policies", e, ptype=ptype, rule_count=len(documents)
            ) from e

        self._logger.debug("policies_added", ptype=ptype, rule_count=len(documents))
        return True

    async def remove_policies(
        self, sec: str, ptype: str, rules: Sequence[Sequence[str]]
    ) -> bool:
        """Delete at most one exact match per rule. Not transactional.

        Returns:
            bool: True if any document was deleted.

        Raises:
            PolicyQueryError: On the first failed delete.
        """
        deleted = 0
        try:
            with self._bounded():
                for rule in rules:
                    result = await self._collection.delete_one(
                        build_rule_filter(ptype, rule)
                    )
                    deleted += result.deleted_count
        except PyMongoError as e:
            raise self._query_error(
                "remove_policies", e, ptype=ptype, deleted_count=deleted
            ) from e

        self._logger.debug("policies_removed", ptype=ptype, deleted_count=deleted)
        return deleted > 0

    async def update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        """Replace at most one exact match of ``old_rule`` with ``new_rule``.

        Returns:
            bool: True if a document was replaced.

        Raises:
            PolicyQueryError: If the replace fails.
        """
        try:
            with self._bounded():
                result = await self._collection.replace_one(
                    build_rule_filter(ptype, old_rule),
                    save_policy_line(ptype, new_rule).to_document(),
                )
        except PyMongoError as e:
            raise self._query_error("update_policy", e, ptype=ptype) from e

        self._logger.debug(
            "policy_updated", ptype=ptype, matched_count=result.matched_count
        )
        return result.matched_count > 0

    # =========================================================================
    # Helpers
    # =========================================================================

    def _bounded(self) -> Any:
        """Timeout scope for non-load operations (None = unbounded)."""
        return pymongo.timeout(self._settings.operation_timeout_seconds)

    async def _drop_collection(self) -> None:
        """Drop the policy collection; a missing namespace is not an error."""
        try:
            with self._bounded():
                await self._collection.drop()
        except OperationFailure as e:
            if e.code != NAMESPACE_NOT_FOUND_CODE:
                raise self._query_error("drop_collection", e) from e
        except PyMongoError as e:
            raise self._query_error("drop_collection", e) from e

    def _decode(self, document: dict[str, Any]) -> CasbinRule:
        """Decode one stored document.

        Raises:
            PolicyDecodeError: If the document is not a valid rule.
        """
        try:
            return CasbinRule.from_document(document)
        except ValidationError as e:
            document_id = str(document.get("_id"))
            self._logger.error(
                "policy_decode_failed", error=e, document_id=document_id
            )
            raise PolicyDecodeError(
                f"Stored policy document {document_id} is not a valid rule",
                code=InfrastructureErrorCode.DATABASE_DATA_ERROR,
                details={"document_id": document_id, "error": str(e)},
            ) from e

    def _query_error(
        self, operation: str, error: PyMongoError, **details: Any
    ) -> PolicyQueryError:
        """Log a driver failure and map it to PolicyQueryError."""
        if error.timeout:
            code = InfrastructureErrorCode.DATABASE_TIMEOUT
        elif operation == "load_policy":
            code = InfrastructureErrorCode.DATABASE_QUERY_FAILED
        else:
            code = InfrastructureErrorCode.DATABASE_WRITE_FAILED

        self._logger.error(
            "policy_operation_failed", error=error, operation=operation, **details
        )
        return PolicyQueryError(
            f"Policy {operation} failed",
            code=code,
            details={"operation": operation, "error": str(error), **details},
        )
