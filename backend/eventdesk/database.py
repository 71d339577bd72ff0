"""
EventDesk Backend — MongoDB Event Store
=========================================

What:  PyMongo-backed implementation of `EventStore`, plus the FastAPI
       dependency that hands the application's store to route handlers.
How:   One `MongoClient` per application instance (it owns its own connection
       pool and is thread-safe). PyMongo is synchronous, so every call runs in
       Starlette's threadpool to keep the event loop free.
Who:   Created by the lifespan handler in main.py (or passed to create_app()
       directly); injected into routes via `get_event_store`.
When:  Connected once at startup; closed at shutdown.

Why:   The driver's own exceptions (PyMongoError, BSON encoding errors, and
       the OverflowError raised for integers beyond int64) never leave this
       module. They become StoreError/StartupError so the service layer only
       deals with the application's exception taxonomy.

Connection Lifecycle:
    connect():  build client → ping() → ensure schedule index
    close():    close the client and drop the collection handle

Error Mapping:
    during connect()       → StartupError (fatal, no retry)
    any later operation    → StoreError (500, detail kept for non-production)
"""

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import BSONError
from fastapi import Request
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

from eventdesk.config import Settings
from eventdesk.exceptions import StartupError, StoreError
from eventdesk.services.store_base import EventStore, UpdateOutcome

logger = logging.getLogger(__name__)

# Everything the driver may raise for a single call
DRIVER_ERRORS = (PyMongoError, BSONError, OverflowError)


class MongoEventStore(EventStore):
    """
    Event store backed by a single MongoDB collection.

    Every driver failure is wrapped in `StoreError` with the driver message as
    its detail; the service layer decides what the client gets to see.
    """

    def __init__(
        self,
        uri: str,
        db_name: str,
        collection_name: str = "events",
        server_selection_timeout_ms: int = 5000,
    ):
        self.uri = uri
        self.db_name = db_name
        self.collection_name = collection_name
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client: Optional[MongoClient] = None
        self._collection: Optional[Collection] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoEventStore":
        return cls(
            uri=settings.mongodb_uri,
            db_name=settings.db_name,
            collection_name=settings.events_collection,
            server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """
        Open the client, verify it with ping() and prepare the collection.

        Raises:
            StartupError: the server could not be reached or rejected the ping.
                No retry is attempted.
        """
        if self._collection is not None:
            return
        try:
            self._client = MongoClient(
                self.uri,
                tz_aware=True,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
            )
            await self.ping()
            collection = self._client[self.db_name][self.collection_name]
            # Backs the "latest first" listing sort
            await run_in_threadpool(
                collection.create_index, [("schedule", DESCENDING)], name="schedule_desc"
            )
        except (StoreError, *DRIVER_ERRORS) as e:
            detail = e.detail if isinstance(e, StoreError) else str(e)
            logger.critical("MongoDB connection error: %s", detail)
            if self._client is not None:
                self._client.close()
                self._client = None
            raise StartupError(detail=detail, context={"db_name": self.db_name})

        self._collection = collection
        logger.info(
            "Connected to MongoDB database '%s' (collection '%s')",
            self.db_name,
            self.collection_name,
        )

    async def close(self) -> None:
        if self._client is not None:
            await run_in_threadpool(self._client.close)
            self._client = None
            self._collection = None
            logger.info("MongoDB connection closed")

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            raise StoreError(detail="Database not initialized. Call connect() first.")
        return self._collection

    # ── Operations ────────────────────────────────────────────────────────

    async def ping(self) -> None:
        """Round-trip to the server; used by connect() as the startup check."""
        if self._client is None:
            raise StoreError(detail="Database not initialized. Call connect() first.")
        try:
            await run_in_threadpool(self._client.admin.command, "ping")
        except DRIVER_ERRORS as e:
            raise StoreError(detail=str(e), context={"operation": "ping"})

    async def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        try:
            result = await run_in_threadpool(self.collection.insert_one, document)
        except DRIVER_ERRORS as e:
            raise StoreError(detail=str(e), context={"operation": "insert_one"})
        return result.inserted_id

    async def find_by_id(self, event_id: ObjectId) -> Optional[Dict[str, Any]]:
        try:
            return await run_in_threadpool(self.collection.find_one, {"_id": event_id})
        except DRIVER_ERRORS as e:
            raise StoreError(
                detail=str(e), context={"operation": "find_one", "event_id": str(event_id)}
            )

    async def find_page(self, skip: int, limit: int) -> List[Dict[str, Any]]:
        def _fetch() -> List[Dict[str, Any]]:
            cursor = (
                self.collection.find({})
                .sort("schedule", DESCENDING)
                .skip(skip)
                .limit(limit)
            )
            return list(cursor)

        try:
            return await run_in_threadpool(_fetch)
        except DRIVER_ERRORS as e:
            raise StoreError(detail=str(e), context={"operation": "find", "skip": skip})

    async def count(self) -> int:
        try:
            return await run_in_threadpool(self.collection.count_documents, {})
        except DRIVER_ERRORS as e:
            raise StoreError(detail=str(e), context={"operation": "count_documents"})

    async def update_by_id(self, event_id: ObjectId, fields: Dict[str, Any]) -> UpdateOutcome:
        try:
            result = await run_in_threadpool(
                self.collection.update_one, {"_id": event_id}, {"$set": fields}
            )
        except DRIVER_ERRORS as e:
            raise StoreError(
                detail=str(e), context={"operation": "update_one", "event_id": str(event_id)}
            )
        return UpdateOutcome(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def delete_by_id(self, event_id: ObjectId) -> int:
        try:
            result = await run_in_threadpool(self.collection.delete_one, {"_id": event_id})
        except DRIVER_ERRORS as e:
            raise StoreError(
                detail=str(e), context={"operation": "delete_one", "event_id": str(event_id)}
            )
        return result.deleted_count


# ── Store Dependency ──────────────────────────────────────────────────────
def get_event_store(request: Request) -> EventStore:
    """
    FastAPI dependency returning the application's event store.

    The store lives on `app.state`, set either by create_app(event_store=...)
    or by the lifespan handler after a successful connect().
    """
    store = getattr(request.app.state, "event_store", None)
    if store is None:
        raise StoreError(detail="Database not initialized. Call connect() first.")
    return store
