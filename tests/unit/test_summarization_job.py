"""Tests for the summarization job"""

import asyncio
from datetime import timedelta

import pytest

from supportdesk.domain.enums import Role, SummarizeOutcome, TicketStatus
from supportdesk.domain.errors import TicketNotFoundError, UpstreamError
from supportdesk.domain.models import Message
from supportdesk.services.summarization_service import SummarizationJob, build_ticket_document
from supportdesk.utils.time import utc_now

from tests.fakes import FakeMessageRepository, FakeTicketRepository, RecordingModel, make_ticket


@pytest.fixture
def tickets():
    return FakeTicketRepository()


@pytest.fixture
def messages():
    return FakeMessageRepository()


def add_messages(messages, ticket, contents):
    start = utc_now()
    for i, (role, content) in enumerate(contents):
        messages.rows.append(Message(
            message_id=f"MSG-{i:04d}",
            ticket_id=ticket.ticket_id,
            sender_id="USR-x",
            sender_role=role,
            content=content,
            created_at=start + timedelta(seconds=i),
        ))


class TestDocument:

    def test_no_messages(self):
        ticket = make_ticket("USR-1", title="Broken mouse", description="Left click dead")
        document = build_ticket_document(ticket, [])
        assert "Title: Broken mouse" in document
        assert "Description: Left click dead" in document
        assert "No messages" in document

    def test_messages_in_order_with_roles(self, messages):
        ticket = make_ticket("USR-1")
        add_messages(messages, ticket, [(Role.CUSTOMER, "help"), (Role.SUPPORT, "on it")])
        document = build_ticket_document(ticket, messages.rows)
        assert document.index("- [customer] help") < document.index("- [support] on it")


class TestPreconditions:

    @pytest.mark.asyncio
    async def test_missing_ticket(self, tickets, messages):
        job = SummarizationJob(tickets, messages, RecordingModel(["x"]))
        with pytest.raises(TicketNotFoundError):
            await job.run("TKT-missing")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.CLOSED])
    async def test_not_resolved_skips_model(self, tickets, messages, status):
        model = RecordingModel(["x"])
        ticket = tickets.put(make_ticket("USR-1", status=status))

        result = await SummarizationJob(tickets, messages, model).run(ticket.ticket_id)

        assert result.outcome == SummarizeOutcome.NOT_RESOLVED
        assert result.success is False
        assert model.prompts == []

    @pytest.mark.asyncio
    async def test_already_summarized_is_a_no_op(self, tickets, messages):
        model = RecordingModel(["new"])
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED, summary="existing"))

        result = await SummarizationJob(tickets, messages, model).run(ticket.ticket_id)

        assert result.outcome == SummarizeOutcome.ALREADY_SUMMARIZED
        assert result.success is True
        assert result.summary == "existing"
        assert model.prompts == []
        assert tickets.rows[ticket.ticket_id].summary == "existing"


class TestGeneration:

    @pytest.mark.asyncio
    async def test_zero_messages_single_call(self, tickets, messages):
        model = RecordingModel(["  Mouse replaced.  "])
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))

        result = await SummarizationJob(tickets, messages, model).run(ticket.ticket_id)

        assert result.outcome == SummarizeOutcome.GENERATED
        assert result.summary == "Mouse replaced."
        assert len(model.prompts) == 1
        assert "No messages" in model.prompts[0]
        stored = tickets.rows[ticket.ticket_id]
        assert stored.summary == "Mouse replaced."
        assert stored.summary_generated_at is not None

    @pytest.mark.asyncio
    async def test_long_thread_is_refined_chunk_by_chunk(self, tickets, messages):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))
        add_messages(messages, ticket, [
            (Role.CUSTOMER if i % 2 else Role.SUPPORT, f"message number {i} " + "detail " * 20)
            for i in range(12)
        ])
        model = RecordingModel(["draft one", "draft two", "final"])

        job = SummarizationJob(tickets, messages, model, chunk_size=300, chunk_overlap=20)
        result = await job.run(ticket.ticket_id)

        assert len(model.prompts) > 2
        assert "CONCISE SUMMARY" in model.prompts[0]
        assert "REFINED SUMMARY" in model.prompts[1]
        assert "draft one" in model.prompts[1]
        assert "draft two" in model.prompts[2]
        assert result.summary == "final"

    @pytest.mark.asyncio
    async def test_empty_model_output_is_an_error(self, tickets, messages):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))

        with pytest.raises(UpstreamError):
            await SummarizationJob(tickets, messages, RecordingModel(["   "])).run(ticket.ticket_id)
        assert tickets.rows[ticket.ticket_id].summary is None

    @pytest.mark.asyncio
    async def test_model_failure_is_upstream_error(self, tickets, messages):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))
        model = RecordingModel([TimeoutError("model timed out")])

        with pytest.raises(UpstreamError) as exc_info:
            await SummarizationJob(tickets, messages, model).run(ticket.ticket_id)
        assert exc_info.value.message == "Failed to generate summary"
        assert tickets.rows[ticket.ticket_id].summary is None

    @pytest.mark.asyncio
    async def test_unconfigured_model(self, tickets, messages):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))
        with pytest.raises(UpstreamError):
            await SummarizationJob(tickets, messages, None).run(ticket.ticket_id)

    @pytest.mark.asyncio
    async def test_message_fetch_failure(self, tickets, messages, monkeypatch):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))

        async def broken(*args, **kwargs):
            raise ConnectionError("mongo down")
        monkeypatch.setattr(messages, "list_for_ticket", broken)

        with pytest.raises(UpstreamError):
            await SummarizationJob(tickets, messages, RecordingModel(["x"])).run(ticket.ticket_id)

    @pytest.mark.asyncio
    async def test_persist_failure(self, tickets, messages, monkeypatch):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))

        async def broken(*args, **kwargs):
            raise ConnectionError("write failed")
        monkeypatch.setattr(tickets, "set_summary_if_unset", broken)

        with pytest.raises(UpstreamError):
            await SummarizationJob(tickets, messages, RecordingModel(["x"])).run(ticket.ticket_id)


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_concurrent_runs_persist_once(self, tickets, messages):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))
        first = SummarizationJob(tickets, messages, RecordingModel(["summary A"]))
        second = SummarizationJob(tickets, messages, RecordingModel(["summary B"]))

        results = await asyncio.gather(first.run(ticket.ticket_id), second.run(ticket.ticket_id))

        stored = tickets.rows[ticket.ticket_id].summary
        outcomes = sorted(r.outcome.value for r in results)
        assert outcomes == ["concurrent_write", "generated"]
        assert all(r.success for r in results)
        assert all(r.summary == stored for r in results)

    @pytest.mark.asyncio
    async def test_ticket_reopened_mid_run_is_not_summarized(self, tickets, messages):
        ticket = tickets.put(make_ticket("USR-1", status=TicketStatus.RESOLVED))

        def reopen(prompt):
            tickets.rows[ticket.ticket_id] = tickets.rows[ticket.ticket_id].model_copy(
                update={"status": TicketStatus.OPEN}
            )

        model = RecordingModel(["late summary"], on_call=reopen)
        result = await SummarizationJob(tickets, messages, model).run(ticket.ticket_id)

        assert result.outcome == SummarizeOutcome.NOT_RESOLVED
        assert result.success is False
        assert tickets.rows[ticket.ticket_id].summary is None
