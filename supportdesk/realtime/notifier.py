"""
Ticket Lifecycle Notifier

Watches ticket updates visible to one subscriber, detects the transition
into "resolved", raises a toast and triggers summarization. One instance
per mounted view (browser tab); instances fire independently and leave
at-most-once summary generation to the summarization job.
"""
import asyncio
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Mapping, Optional, Set

from .board import TicketBoard
from .change_feed import ChangeFeed, Subscription
from ..domain.enums import ChangeOperation, NotificationKind, SummarizeOutcome, TicketStatus
from ..domain.models import ChangeEvent, NotificationEvent
from ..repositories.mongo_client import TICKETS
from ..utils.logger import get_logger

logger = get_logger(__name__)

Summarize = Callable[[str], Awaitable[Dict[str, Any]]]

_RESOLVED = TicketStatus.RESOLVED.value


def is_resolved_transition(old: Optional[Mapping[str, Any]], new: Optional[Mapping[str, Any]]) -> bool:
    """
    True iff a ticket moved into resolved from a known, different status.

    A missing previous row or previous status is not a transition.
    """
    if not isinstance(old, Mapping) or not isinstance(new, Mapping):
        return False
    old_status = old.get("status")
    if old_status is None:
        return False
    return old_status != _RESOLVED and new.get("status") == _RESOLVED


class TicketLifecycleNotifier:
    """Subscription-driven dispatcher of ticket lifecycle notifications"""

    def __init__(
        self,
        feed: ChangeFeed,
        summarize: Summarize,
        scope: Optional[Dict[str, Any]] = None,
        board: Optional[TicketBoard] = None,
        table: str = TICKETS
    ):
        self._feed = feed
        self._summarize = summarize
        self._scope = scope
        self._table = table
        self.board = board or TicketBoard()

        self._queue: "asyncio.Queue[Optional[NotificationEvent]]" = asyncio.Queue()
        self._subscription: Optional[Subscription] = None
        self._dispatch_task: Optional[asyncio.Task] = None
        self._summary_tasks: Set[asyncio.Task] = set()
        self._stopped = False

    @property
    def running(self) -> bool:
        """True while subscribed and the feed has not ended"""
        return (
            self._dispatch_task is not None
            and not self._dispatch_task.done()
            and not self._stopped
        )

    # =========================================================================
    # Mount / unmount
    # =========================================================================

    async def start(self) -> None:
        """Subscribe to ticket updates and start the dispatch loop"""
        if self._dispatch_task is not None:
            return
        self._subscription = await self._feed.subscribe(
            self._table, [ChangeOperation.UPDATE, ChangeOperation.REPLACE], self._scope
        )
        self._dispatch_task = asyncio.create_task(self._run())
        logger.info("Ticket notifier started")

    async def stop(self) -> None:
        """Cancel pending work and release the subscription"""
        if self._stopped:
            return
        self._stopped = True
        self.board.close()

        tasks = list(self._summary_tasks)
        if self._dispatch_task is not None:
            tasks.append(self._dispatch_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._summary_tasks.clear()

        if self._subscription is not None:
            await self._subscription.close()
        self._queue.put_nowait(None)
        logger.info("Ticket notifier stopped")

    async def __aenter__(self) -> "TicketLifecycleNotifier":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    # =========================================================================
    # Consumption
    # =========================================================================

    async def events(self) -> AsyncIterator[NotificationEvent]:
        """Notification events in emission order, until stopped"""
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event

    async def next_event(self, timeout: Optional[float] = None) -> Optional[NotificationEvent]:
        """Next event, or None on timeout or once stopped"""
        try:
            event = await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None
        if event is None:
            # keep the end marker for other readers
            self._queue.put_nowait(None)
        return event

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def _run(self) -> None:
        try:
            async for event in self._subscription:
                if self._stopped:
                    break
                self.dispatch(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Change feed failed: {e}", exc_info=True)
        if not self._stopped:
            # Feed ended on its own; tell readers so they can reconnect
            self._queue.put_nowait(None)

    def dispatch(self, event: ChangeEvent) -> None:
        """Handle one change event, in feed order"""
        if self._stopped or not self.board.apply(event):
            return

        if event.new is not None:
            self._emit(NotificationEvent(
                kind=NotificationKind.TICKET_UPDATED,
                title="Ticket Updated",
                ticket_id=event.ticket_id,
                payload={"ticket": _jsonable(event.new)},
            ))

        if not is_resolved_transition(event.old, event.new):
            return

        title = event.new.get("title") or event.ticket_id
        logger.info("Ticket resolved", extra={"ticket_id": event.ticket_id, "event_kind": "ticket_resolved"})
        self._emit(NotificationEvent(
            kind=NotificationKind.TICKET_RESOLVED,
            title="Ticket Resolved",
            message=f'"{title}" has been marked as resolved',
            ticket_id=event.ticket_id,
        ))

        task = asyncio.create_task(self._run_summary(event.ticket_id, title))
        self._summary_tasks.add(task)
        task.add_done_callback(self._summary_tasks.discard)

    async def _run_summary(self, ticket_id: str, title: str) -> None:
        try:
            body = await self._summarize(ticket_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Summarization failed: {e}", extra={"ticket_id": ticket_id})
            self._emit_failure(ticket_id, title)
            return

        if not isinstance(body, Mapping):
            logger.error(
                f"Summarize returned a {type(body).__name__}, expected an object",
                extra={"ticket_id": ticket_id}
            )
            self._emit_failure(ticket_id, title)
        elif body.get("success") and body.get("summary"):
            self._emit(NotificationEvent(
                kind=NotificationKind.SUMMARY_GENERATED,
                title="Summary Generated",
                message=f'A summary is available for "{title}"',
                ticket_id=ticket_id,
                payload={"summary": body["summary"]},
            ))
        elif body.get("outcome") == SummarizeOutcome.NOT_RESOLVED.value:
            logger.info("Summary skipped, ticket no longer resolved", extra={"ticket_id": ticket_id})
        else:
            self._emit_failure(ticket_id, title)

    def _emit_failure(self, ticket_id: str, title: str) -> None:
        self._emit(NotificationEvent(
            kind=NotificationKind.SUMMARY_FAILED,
            title="Summary Failed",
            message=f'Could not summarize "{title}"',
            ticket_id=ticket_id,
        ))

    def _emit(self, event: NotificationEvent) -> None:
        if self._stopped:
            return
        self._queue.put_nowait(event)


def _jsonable(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Row with datetimes rendered as ISO strings"""
    out: Dict[str, Any] = {}
    for key, value in row.items():
        out[key] = value.isoformat() if hasattr(value, "isoformat") else value
    return out
