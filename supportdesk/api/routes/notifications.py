"""Notifications API - Server-sent event stream of ticket lifecycle events"""
from typing import AsyncIterator, Optional
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..deps import get_container, get_current_user_dep, get_session_token
from ...container import ServiceContainer
from ...domain.models import ActorContext
from ...domain.errors import UpstreamError
from ...realtime import HttpSummarizeClient, TicketBoard, TicketLifecycleNotifier
from ...utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

INITIAL_ROWS = 200


async def _event_stream(
    request: Request,
    notifier: TicketLifecycleNotifier,
    heartbeat: float
) -> AsyncIterator[str]:
    """SSE frames until the client goes away or the feed ends"""
    try:
        yield "retry: 3000\n\n"
        while True:
            if await request.is_disconnected():
                break
            event = await notifier.next_event(timeout=heartbeat)
            if event is not None:
                yield event.to_sse()
            elif not notifier.running:
                break
            else:
                yield ": keep-alive\n\n"
    finally:
        await notifier.stop()


@router.get("/stream")
async def stream_notifications(
    request: Request,
    actor: ActorContext = Depends(get_current_user_dep),
    token: Optional[str] = Depends(get_session_token),
    container: ServiceContainer = Depends(get_container)
):
    """
    Stream ticket notifications for the caller

    One notifier is mounted per connection and unmounted when the client
    disconnects. Customers only hear about their own tickets.
    """
    settings = container.settings
    scope = None if actor.role.is_staff else {"customer_id": actor.user_id}

    tickets, _ = await container.ticket_service.list_tickets(actor, limit=INITIAL_ROWS)
    board = TicketBoard(t.model_dump() for t in tickets)

    base_url = settings.app_base_url or str(request.base_url)
    notifier = TicketLifecycleNotifier(
        container.change_feed,
        HttpSummarizeClient(base_url, token, timeout=settings.summarization_timeout_seconds + 30),
        scope=scope,
        board=board,
    )
    try:
        await notifier.start()
    except Exception as e:
        logger.error(f"Could not subscribe to ticket changes: {e}", extra={"user_id": actor.user_id})
        raise UpstreamError("Realtime updates are unavailable", details={"reason": str(e)})

    logger.info("Notification stream opened", extra={"user_id": actor.user_id, "role": actor.role.value})
    return StreamingResponse(
        _event_stream(request, notifier, settings.notifier_heartbeat_seconds),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    )
