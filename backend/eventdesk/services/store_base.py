"""
EventDesk Backend — Abstract Event Store Interface
====================================================

What:  Abstract base class defining the contract the service layer needs from
       the document store.
How:   `MongoEventStore` (database.py) implements it on top of PyMongo; the test
       suite implements it in memory. The application receives one instance
       and hands it to `EventService`; nothing reaches for a global handle.

Contract:
    - Identifiers are `bson.ObjectId` values; callers validate textual IDs
      before calling in.
    - Single-document operations are atomic at the store's granularity.
    - "Not found" is reported as None / a zero count, never as an exception.
    - Driver failures surface as `StoreError`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bson import ObjectId


@dataclass(frozen=True)
class UpdateOutcome:
    """Counts reported by a single-document update."""

    matched_count: int
    modified_count: int


class EventStore(ABC):
    """Collection-scoped operations on event documents."""

    @abstractmethod
    async def insert_one(self, document: Dict[str, Any]) -> ObjectId:
        """Insert a document and return the identifier the store assigned."""
        ...

    @abstractmethod
    async def find_by_id(self, event_id: ObjectId) -> Optional[Dict[str, Any]]:
        """Return the document with this identifier, or None."""
        ...

    @abstractmethod
    async def find_page(self, skip: int, limit: int) -> List[Dict[str, Any]]:
        """
        Return one page of documents sorted by `schedule` descending.

        Ties on `schedule` keep whatever stable order the store provides.
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        """Total number of event documents (unfiltered)."""
        ...

    @abstractmethod
    async def update_by_id(self, event_id: ObjectId, fields: Dict[str, Any]) -> UpdateOutcome:
        """Merge `fields` into the matching document (partial set, not replace)."""
        ...

    @abstractmethod
    async def delete_by_id(self, event_id: ObjectId) -> int:
        """Delete the matching document and return the deleted count (0 or 1)."""
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the store is unreachable."""
        ...

    async def close(self) -> None:
        """Release connections. Stores without resources need not override."""
        return None
