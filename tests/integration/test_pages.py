"""Tests for page routes behind the access gate middleware"""

import pytest

from supportdesk.api.middleware import is_gated
from supportdesk.domain.enums import Role, TicketStatus
from supportdesk.domain.models import Message
from supportdesk.utils.time import utc_now

from tests.fakes import make_ticket


class TestBypass:

    @pytest.mark.parametrize("path,gated", [
        ("/api/v1/tickets", False),
        ("/api", False),
        ("/static/app.js", False),
        ("/health", False),
        ("/favicon.ico", False),
        ("/apix", True),
        ("/customer-dashboard", True),
        ("/", True),
    ])
    def test_is_gated(self, path, gated):
        assert is_gated(path) is gated


class TestAnonymous:

    @pytest.mark.parametrize("path,location", [
        ("/customer-dashboard", "/login"),
        ("/customer-dashboard/tickets", "/login"),
        ("/support-dashboard", "/employee-login"),
        ("/admin-dashboard/users", "/employee-login"),
    ])
    def test_redirects_to_login(self, client, path, location):
        response = client.get(path, follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == location

    @pytest.mark.parametrize("path", ["/", "/login", "/employee-login"])
    def test_public_pages_render(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]

    def test_unauthorized_page(self, client):
        response = client.get("/unauthorized")
        assert response.status_code == 403
        assert "Unauthorized" in response.text

    def test_api_not_redirected(self, client):
        response = client.get("/api/v1/tickets/", follow_redirects=False)
        assert response.status_code == 401


class TestSignedIn:

    def test_customer_dashboard_lists_own_tickets(self, sign_in, customer, other_customer, tickets):
        tickets.put(make_ticket(customer.user_id, title="My broken laptop"))
        tickets.put(make_ticket(other_customer.user_id, title="Someone else's"))

        response = sign_in(customer).get("/customer-dashboard")

        assert response.status_code == 200
        assert "My broken laptop" in response.text
        assert "Someone else" not in response.text

    def test_customer_blocked_from_support(self, sign_in, customer):
        response = sign_in(customer).get("/support-dashboard", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/unauthorized"

    def test_support_blocked_from_admin(self, sign_in, support):
        response = sign_in(support).get("/admin-dashboard", follow_redirects=False)
        assert response.headers["location"] == "/unauthorized"

    def test_admin_reaches_support_portal(self, sign_in, admin):
        response = sign_in(admin).get("/support-dashboard")
        assert response.status_code == 200

    @pytest.mark.parametrize("fixture,home", [
        ("customer", "/customer-dashboard"),
        ("support", "/support-dashboard"),
        ("admin", "/admin-dashboard"),
    ])
    def test_login_page_sends_signed_in_users_home(self, request, sign_in, fixture, home):
        profile = request.getfixturevalue(fixture)
        response = sign_in(profile).get("/login", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == home

    def test_role_lookup_failure_denies(self, sign_in, customer, profiles):
        client = sign_in(customer)
        profiles.fail_with = ConnectionError("mongo down")
        response = client.get("/customer-dashboard", follow_redirects=False)
        assert response.headers["location"] == "/unauthorized"

    def test_support_chat_page(self, sign_in, support, customer, tickets):
        ticket = tickets.put(make_ticket(customer.user_id, status=TicketStatus.IN_PROGRESS, title="Toner"))
        response = sign_in(support).get(f"/support-dashboard/tickets/{ticket.ticket_id}/chat")
        assert response.status_code == 200
        assert "Toner" in response.text
        assert "No messages" in response.text

    def test_customer_chat_page(self, sign_in, customer, tickets, messages):
        ticket = tickets.put(make_ticket(customer.user_id, title="Scanner jams"))
        messages.rows.append(Message(
            message_id="MSG-1",
            ticket_id=ticket.ticket_id,
            sender_id=customer.user_id,
            sender_role=Role.CUSTOMER,
            content="Every third page",
            created_at=utc_now(),
        ))

        response = sign_in(customer).get(f"/customer-dashboard/tickets/{ticket.ticket_id}/chat")

        assert response.status_code == 200
        assert "Scanner jams" in response.text
        assert "[customer] Every third page" in response.text
        assert 'href="/customer-dashboard/tickets"' in response.text

    def test_customer_chat_for_other_customers_ticket_is_404(self, sign_in, customer, other_customer, tickets):
        ticket = tickets.put(make_ticket(other_customer.user_id))
        response = sign_in(customer).get(f"/customer-dashboard/tickets/{ticket.ticket_id}/chat")
        assert response.status_code == 404

    def test_support_blocked_from_customer_chat(self, sign_in, support, customer, tickets):
        ticket = tickets.put(make_ticket(customer.user_id))
        response = sign_in(support).get(
            f"/customer-dashboard/tickets/{ticket.ticket_id}/chat", follow_redirects=False
        )
        assert response.headers["location"] == "/unauthorized"

    def test_dashboards_link_to_portal_chat(self, sign_in, customer, support, tickets):
        ticket = tickets.put(make_ticket(customer.user_id))

        customer_page = sign_in(customer).get("/customer-dashboard").text
        assert f"/customer-dashboard/tickets/{ticket.ticket_id}/chat" in customer_page

        support_page = sign_in(support).get("/support-dashboard").text
        assert f"/support-dashboard/tickets/{ticket.ticket_id}/chat" in support_page

    def test_admin_users_page(self, sign_in, admin, support):
        response = sign_in(admin).get("/admin-dashboard/users")
        assert response.status_code == 200
        assert support.email in response.text

    def test_logout_clears_session(self, sign_in, customer, settings):
        client = sign_in(customer)
        response = client.get("/logout", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert settings.session_cookie_name in response.headers.get("set-cookie", "")
