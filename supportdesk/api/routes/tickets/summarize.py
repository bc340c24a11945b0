"""
Ticket Summarization Route

Triggered by the notifier when a ticket becomes resolved. Skip cases
return 200; failures return {error, details} with 500.
"""

from fastapi import APIRouter, Depends, status

from ...deps import get_container, get_current_user_dep
from ...middleware import error_response
from ....container import ServiceContainer
from ....domain.models import ActorContext
from ....domain.errors import UpstreamError
from ....utils.logger import get_logger
from .schemas import SummarizeResponse

logger = get_logger(__name__)
router = APIRouter()


@router.post("/{ticket_id}/summarize", response_model=SummarizeResponse)
async def summarize_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    container: ServiceContainer = Depends(get_container)
):
    """
    Generate and store the summary of a resolved ticket

    Runs at most once per ticket; repeated or concurrent calls return the
    stored summary.
    """
    await container.ticket_service.get_visible_ticket(ticket_id, actor)

    try:
        result = await container.summarizer.run(ticket_id)
    except UpstreamError as e:
        logger.error(
            f"Summarization failed: {e.message}",
            extra={"ticket_id": ticket_id, "user_id": actor.user_id, "outcome": "failed"}
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message, details=e.details)

    return SummarizeResponse(
        success=result.success,
        summary=result.summary,
        outcome=result.outcome.value
    )
