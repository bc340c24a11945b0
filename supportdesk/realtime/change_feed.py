"""
Change Feed - cancellable subscriptions to row mutations

A subscription is an async iterator of ChangeEvent with an explicit,
idempotent close(). Events come out in the order the source delivers them.
"""
from typing import Any, Dict, Iterable, List, Optional, Protocol
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..domain.enums import ChangeOperation
from ..domain.models import ChangeEvent
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Subscription(Protocol):
    """Live stream of change events"""

    def __aiter__(self) -> "Subscription": ...

    async def __anext__(self) -> ChangeEvent: ...

    async def close(self) -> None: ...


class ChangeFeed(Protocol):
    """Source of change subscriptions"""

    async def subscribe(
        self,
        table: str,
        events: Iterable[ChangeOperation],
        match: Optional[Dict[str, Any]] = None
    ) -> Subscription: ...


def change_from_mongo(change: Dict[str, Any]) -> ChangeEvent:
    """Convert a MongoDB change stream document to a ChangeEvent"""
    new = change.get("fullDocument")
    old = change.get("fullDocumentBeforeChange")
    for doc in (new, old):
        if doc is not None:
            doc.pop("_id", None)

    ticket_id = None
    if new and new.get("ticket_id"):
        ticket_id = new["ticket_id"]
    elif old and old.get("ticket_id"):
        ticket_id = old["ticket_id"]
    else:
        ticket_id = (change.get("documentKey") or {}).get("_id")

    return ChangeEvent(
        operation=ChangeOperation(change["operationType"]),
        ticket_id=ticket_id,
        old=old,
        new=new,
    )


class MongoSubscription:
    """Subscription backed by a MongoDB change stream"""

    def __init__(self, stream: Any, table: str):
        self._stream = stream
        self._table = table
        self._closed = False

    def __aiter__(self) -> "MongoSubscription":
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed:
            raise StopAsyncIteration
        try:
            change = await self._stream.next()
        except StopAsyncIteration:
            await self.close()
            raise
        return change_from_mongo(change)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._stream.close()
        logger.info(f"Closed change stream on {self._table}")

    async def __aenter__(self) -> "MongoSubscription":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


class MongoChangeFeed:
    """Change feed over MongoDB change streams (requires a replica set)"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db

    async def subscribe(
        self,
        table: str,
        events: Iterable[ChangeOperation],
        match: Optional[Dict[str, Any]] = None
    ) -> MongoSubscription:
        """
        Watch a collection

        Args:
            table: Collection name
            events: Operation types to deliver
            match: Optional filter applied to the post-change document,
                e.g. {"customer_id": "USR-1"}
        """
        stage: Dict[str, Any] = {"operationType": {"$in": [e.value for e in events]}}
        for field, value in (match or {}).items():
            stage[f"fullDocument.{field}"] = value
        pipeline: List[Dict[str, Any]] = [{"$match": stage}]

        stream = self._db[table].watch(
            pipeline,
            full_document="updateLookup",
            full_document_before_change="whenAvailable",
        )
        logger.info(f"Opened change stream on {table}")
        return MongoSubscription(stream, table)
