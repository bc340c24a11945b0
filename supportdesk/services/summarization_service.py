"""
Summarization Job - refine-style synopsis of a resolved ticket

Runs at most once per ticket: cheap preconditions are checked before any
model call, and the result is persisted through a compare-and-swap write
that only lands while the ticket is still resolved and unsummarized.
"""
from typing import List, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter

from .llm import SUMMARY_PROMPT, SUMMARY_REFINE_PROMPT, SummarizationModel
from ..domain.enums import SummarizeOutcome, TicketStatus
from ..domain.errors import ConcurrencyConflict, DomainError, NotFoundError, UpstreamError
from ..domain.models import Message, SummarizeResult, Ticket
from ..repositories.message_repo import MessageRepository
from ..repositories.ticket_repo import TicketRepository
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


def build_ticket_document(ticket: Ticket, messages: List[Message]) -> str:
    """Title, description and the conversation, oldest message first"""
    if messages:
        thread = "\n".join(f"- [{m.sender_role.value}] {m.content}" for m in messages)
    else:
        thread = "No messages"
    return (
        f"Title: {ticket.title}\n"
        f"Description: {ticket.description or 'No description'}\n"
        f"\n"
        f"Messages:\n"
        f"{thread}\n"
    )


class SummarizationJob:
    """Produces and persists the summary of one resolved ticket"""

    def __init__(
        self,
        tickets: TicketRepository,
        messages: MessageRepository,
        model: Optional[SummarizationModel],
        chunk_size: int = 3000,
        chunk_overlap: int = 200
    ):
        self._tickets = tickets
        self._messages = messages
        self._model = model
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
        )

    async def run(self, ticket_id: str) -> SummarizeResult:
        """
        Summarize a ticket

        Returns:
            SummarizeResult; skip cases are successful no-ops or
            not_resolved with success False

        Raises:
            TicketNotFoundError: The ticket does not exist
            UpstreamError: Fetch, split, model or persist failed
        """
        ticket = await self._fetch_ticket(ticket_id)

        if ticket.status != TicketStatus.RESOLVED:
            logger.info("Summary skipped: not resolved", extra={"ticket_id": ticket_id, "outcome": "not_resolved"})
            return SummarizeResult(outcome=SummarizeOutcome.NOT_RESOLVED, success=False)

        if ticket.summary is not None:
            logger.info("Summary skipped: already summarized", extra={"ticket_id": ticket_id, "outcome": "already_summarized"})
            return SummarizeResult(
                outcome=SummarizeOutcome.ALREADY_SUMMARIZED,
                success=True,
                summary=ticket.summary,
            )

        summary = await self._generate(ticket)

        try:
            return await self._persist(ticket_id, summary)
        except ConcurrencyConflict:
            return await self._resolve_conflict(ticket_id)

    # =========================================================================
    # Steps
    # =========================================================================

    async def _fetch_ticket(self, ticket_id: str) -> Ticket:
        try:
            return await self._tickets.get_ticket_or_raise(ticket_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to fetch ticket: {e}", extra={"ticket_id": ticket_id})
            raise UpstreamError("Failed to fetch ticket", details={"reason": str(e)})

    async def _generate(self, ticket: Ticket) -> str:
        if self._model is None:
            raise UpstreamError("Summarization model is not configured")

        try:
            messages = await self._messages.list_for_ticket(ticket.ticket_id)
        except Exception as e:
            logger.error(f"Failed to fetch messages: {e}", extra={"ticket_id": ticket.ticket_id})
            raise UpstreamError("Failed to fetch messages", details={"reason": str(e)})

        try:
            chunks = self._splitter.split_text(build_ticket_document(ticket, messages))
        except Exception as e:
            raise UpstreamError("Failed to prepare ticket text", details={"reason": str(e)})

        logger.info(
            f"Summarizing {len(messages)} messages in {len(chunks)} chunks",
            extra={"ticket_id": ticket.ticket_id}
        )

        try:
            summary = await self.refine(chunks)
        except DomainError:
            raise
        except Exception as e:
            logger.error(f"Model call failed: {e}", exc_info=True, extra={"ticket_id": ticket.ticket_id})
            raise UpstreamError("Failed to generate summary", details={"reason": str(e) or type(e).__name__})

        summary = summary.strip()
        if not summary:
            raise UpstreamError("Model returned an empty summary")
        return summary

    async def refine(self, chunks: List[str]) -> str:
        """Initial summary from the first chunk, refined by each later chunk"""
        if not chunks:
            raise UpstreamError("Nothing to summarize")

        summary = await self._model.complete(SUMMARY_PROMPT.format(text=chunks[0]))
        for chunk in chunks[1:]:
            summary = await self._model.complete(
                SUMMARY_REFINE_PROMPT.format(existing_answer=summary, text=chunk)
            )
        return summary

    async def _persist(self, ticket_id: str, summary: str) -> SummarizeResult:
        try:
            updated = await self._tickets.set_summary_if_unset(ticket_id, summary, utc_now())
        except Exception as e:
            logger.error(f"Failed to persist summary: {e}", extra={"ticket_id": ticket_id})
            raise UpstreamError("Failed to update ticket with summary", details={"reason": str(e)})

        if updated is None:
            raise ConcurrencyConflict("Ticket changed before the summary could be written")

        logger.info("Summary persisted", extra={"ticket_id": ticket_id, "outcome": "generated"})
        return SummarizeResult(outcome=SummarizeOutcome.GENERATED, success=True, summary=updated.summary)

    async def _resolve_conflict(self, ticket_id: str) -> SummarizeResult:
        """The guard failed: report what the faster writer stored"""
        current = await self._fetch_ticket(ticket_id)
        if current.summary is not None:
            logger.info("Summary written by a concurrent run", extra={"ticket_id": ticket_id, "outcome": "concurrent_write"})
            return SummarizeResult(
                outcome=SummarizeOutcome.CONCURRENT_WRITE,
                success=True,
                summary=current.summary,
            )
        logger.info("Ticket left resolved state during summarization", extra={"ticket_id": ticket_id, "outcome": "not_resolved"})
        return SummarizeResult(outcome=SummarizeOutcome.NOT_RESOLVED, success=False)
