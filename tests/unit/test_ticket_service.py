"""Tests for ticket, message and admin services"""

import pytest

from supportdesk.domain.enums import Role, TicketPriority, TicketStatus
from supportdesk.domain.errors import (
    AuthorizationError, ProfileNotFoundError, TicketNotFoundError, ValidationError
)
from supportdesk.domain.models import ActorContext
from supportdesk.services import AdminService, MessageService, TicketService

from tests.fakes import FakeMessageRepository, FakeProfileRepository, FakeTicketRepository, make_profile, make_ticket


def actor_for(profile):
    return ActorContext(user_id=profile.user_id, email=profile.email, display_name=profile.full_name, role=profile.role)


@pytest.fixture
def tickets():
    return FakeTicketRepository()


@pytest.fixture
def messages():
    return FakeMessageRepository()


@pytest.fixture
def profiles():
    return FakeProfileRepository()


@pytest.fixture
def service(tickets, messages, profiles):
    return TicketService(tickets, messages, profiles)


@pytest.fixture
def people(profiles):
    return {role: profiles.put(make_profile(role)) for role in Role}


class TestCreateAndList:

    @pytest.mark.asyncio
    async def test_customer_creates_open_ticket(self, service, people):
        customer = actor_for(people[Role.CUSTOMER])
        ticket = await service.create_ticket("Wifi down", "Since Monday", TicketPriority.HIGH, customer)
        assert ticket.status == TicketStatus.OPEN
        assert ticket.customer_id == customer.user_id
        assert ticket.summary is None

    @pytest.mark.asyncio
    async def test_staff_cannot_create(self, service, people):
        with pytest.raises(AuthorizationError):
            await service.create_ticket("x", "y", TicketPriority.LOW, actor_for(people[Role.SUPPORT]))

    @pytest.mark.asyncio
    async def test_customers_only_see_their_own(self, service, tickets, people, profiles):
        customer = people[Role.CUSTOMER]
        other = profiles.put(make_profile(Role.CUSTOMER))
        tickets.put(make_ticket(customer.user_id))
        tickets.put(make_ticket(other.user_id))

        mine, total = await service.list_tickets(actor_for(customer))
        assert [t.customer_id for t in mine] == [customer.user_id]
        assert total == 1

        everything, total = await service.list_tickets(actor_for(people[Role.SUPPORT]))
        assert total == 2

    @pytest.mark.asyncio
    async def test_other_customers_ticket_is_not_found(self, service, tickets, people, profiles):
        other = profiles.put(make_profile(Role.CUSTOMER))
        ticket = tickets.put(make_ticket(other.user_id))
        with pytest.raises(TicketNotFoundError):
            await service.get_visible_ticket(ticket.ticket_id, actor_for(people[Role.CUSTOMER]))


class TestUpdate:

    @pytest.mark.asyncio
    async def test_customer_edits_own_fields(self, service, tickets, people):
        customer = people[Role.CUSTOMER]
        ticket = tickets.put(make_ticket(customer.user_id))
        updated = await service.update_ticket(
            ticket.ticket_id, {"title": "New title", "priority": TicketPriority.LOW}, actor_for(customer)
        )
        assert updated.title == "New title"
        assert updated.priority == TicketPriority.LOW

    @pytest.mark.asyncio
    async def test_customer_cannot_change_status(self, service, tickets, people):
        customer = people[Role.CUSTOMER]
        ticket = tickets.put(make_ticket(customer.user_id))
        with pytest.raises(ValidationError):
            await service.update_ticket(ticket.ticket_id, {"status": TicketStatus.RESOLVED}, actor_for(customer))

    @pytest.mark.asyncio
    async def test_staff_can_change_status(self, service, tickets, people):
        ticket = tickets.put(make_ticket(people[Role.CUSTOMER].user_id))
        updated = await service.update_ticket(
            ticket.ticket_id, {"status": TicketStatus.RESOLVED}, actor_for(people[Role.SUPPORT])
        )
        assert updated.status == TicketStatus.RESOLVED

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, service, tickets, people):
        customer = people[Role.CUSTOMER]
        ticket = tickets.put(make_ticket(customer.user_id))
        with pytest.raises(ValidationError):
            await service.update_ticket(ticket.ticket_id, {"title": "  "}, actor_for(customer))


class TestStaffWorkflows:

    @pytest.mark.asyncio
    async def test_set_status_requires_staff(self, service, tickets, people):
        ticket = tickets.put(make_ticket(people[Role.CUSTOMER].user_id))
        with pytest.raises(AuthorizationError):
            await service.set_status(ticket.ticket_id, TicketStatus.CLOSED, actor_for(people[Role.CUSTOMER]))

    @pytest.mark.asyncio
    async def test_set_priority(self, service, tickets, people):
        ticket = tickets.put(make_ticket(people[Role.CUSTOMER].user_id))
        updated = await service.set_priority(ticket.ticket_id, TicketPriority.HIGH, actor_for(people[Role.ADMIN]))
        assert updated.priority == TicketPriority.HIGH

    @pytest.mark.asyncio
    async def test_assign_to_support(self, service, tickets, people):
        ticket = tickets.put(make_ticket(people[Role.CUSTOMER].user_id))
        support = people[Role.SUPPORT]
        updated = await service.assign(ticket.ticket_id, support.user_id, actor_for(people[Role.ADMIN]))
        assert updated.assigned_to == support.user_id

    @pytest.mark.asyncio
    async def test_assign_to_customer_rejected(self, service, tickets, people):
        customer = people[Role.CUSTOMER]
        ticket = tickets.put(make_ticket(customer.user_id))
        with pytest.raises(ValidationError):
            await service.assign(ticket.ticket_id, customer.user_id, actor_for(people[Role.ADMIN]))

    @pytest.mark.asyncio
    async def test_assign_to_unknown_user(self, service, tickets, people):
        ticket = tickets.put(make_ticket(people[Role.CUSTOMER].user_id))
        with pytest.raises(ProfileNotFoundError):
            await service.assign(ticket.ticket_id, "USR-ghost", actor_for(people[Role.ADMIN]))

    @pytest.mark.asyncio
    async def test_only_admin_assigns(self, service, tickets, people):
        ticket = tickets.put(make_ticket(people[Role.CUSTOMER].user_id))
        with pytest.raises(AuthorizationError):
            await service.assign(ticket.ticket_id, people[Role.SUPPORT].user_id, actor_for(people[Role.SUPPORT]))

    @pytest.mark.asyncio
    async def test_admin_delete_removes_thread(self, service, tickets, messages, people):
        customer = people[Role.CUSTOMER]
        ticket = tickets.put(make_ticket(customer.user_id))
        chat = MessageService(messages, service)
        await chat.post_message(ticket.ticket_id, "hello", actor_for(customer))

        await service.delete_ticket(ticket.ticket_id, actor_for(people[Role.ADMIN]))
        assert ticket.ticket_id not in tickets.rows
        assert messages.rows == []


class TestMessages:

    @pytest.mark.asyncio
    async def test_sender_role_is_snapshot(self, service, tickets, messages, people):
        customer = people[Role.CUSTOMER]
        ticket = tickets.put(make_ticket(customer.user_id))
        chat = MessageService(messages, service)

        await chat.post_message(ticket.ticket_id, "printer broke", actor_for(customer))
        await chat.post_message(ticket.ticket_id, "sending a tech", actor_for(people[Role.SUPPORT]))

        thread = await chat.list_messages(ticket.ticket_id, actor_for(customer))
        assert [(m.sender_role, m.content) for m in thread] == [
            (Role.CUSTOMER, "printer broke"),
            (Role.SUPPORT, "sending a tech"),
        ]

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, service, tickets, messages, people):
        customer = people[Role.CUSTOMER]
        ticket = tickets.put(make_ticket(customer.user_id))
        with pytest.raises(ValidationError):
            await MessageService(messages, service).post_message(ticket.ticket_id, "   ", actor_for(customer))

    @pytest.mark.asyncio
    async def test_cannot_post_on_other_customers_ticket(self, service, tickets, messages, people, profiles):
        other = profiles.put(make_profile(Role.CUSTOMER))
        ticket = tickets.put(make_ticket(other.user_id))
        with pytest.raises(TicketNotFoundError):
            await MessageService(messages, service).post_message(
                ticket.ticket_id, "hi", actor_for(people[Role.CUSTOMER])
            )


class TestAdminService:

    @pytest.fixture
    def admin_service(self, profiles, tickets):
        return AdminService(profiles, tickets)

    @pytest.mark.asyncio
    async def test_convert_by_email(self, admin_service, profiles, people):
        customer = people[Role.CUSTOMER]
        updated = await admin_service.convert_to_staff(customer.email, actor_for(people[Role.ADMIN]))
        assert updated.role == Role.SUPPORT
        assert profiles.rows[customer.user_id].role == Role.SUPPORT

    @pytest.mark.asyncio
    async def test_admin_cannot_change_own_role(self, admin_service, people):
        admin = people[Role.ADMIN]
        with pytest.raises(ValidationError):
            await admin_service.convert_to_staff(admin.email, actor_for(admin))
        with pytest.raises(ValidationError):
            await admin_service.remove_access(admin.user_id, actor_for(admin))

    @pytest.mark.asyncio
    async def test_convert_unknown_email(self, admin_service, people):
        with pytest.raises(ProfileNotFoundError):
            await admin_service.convert_to_staff("nobody@example.com", actor_for(people[Role.ADMIN]))

    @pytest.mark.asyncio
    async def test_remove_access_unassigns_tickets(self, admin_service, tickets, profiles, people):
        support = people[Role.SUPPORT]
        ticket = tickets.put(make_ticket(people[Role.CUSTOMER].user_id, assigned_to=support.user_id))

        updated = await admin_service.remove_access(support.user_id, actor_for(people[Role.ADMIN]))

        assert updated.role == Role.CUSTOMER
        assert tickets.rows[ticket.ticket_id].assigned_to is None

    @pytest.mark.asyncio
    async def test_list_staff(self, admin_service, people):
        staff = await admin_service.list_staff(actor_for(people[Role.ADMIN]))
        assert [p.user_id for p in staff] == [people[Role.SUPPORT].user_id]

    @pytest.mark.asyncio
    async def test_non_admin_rejected(self, admin_service, people):
        with pytest.raises(AuthorizationError):
            await admin_service.list_staff(actor_for(people[Role.SUPPORT]))
