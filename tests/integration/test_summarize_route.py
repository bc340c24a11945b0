"""Tests for POST /api/v1/tickets/{id}/summarize"""

from supportdesk.domain.enums import TicketStatus

from tests.fakes import make_ticket


def summarize(client, ticket_id, headers):
    return client.post(f"/api/v1/tickets/{ticket_id}/summarize", headers=headers)


class TestSummarizeRoute:

    def test_generates_once(self, client, customer, tickets, model, auth_headers):
        ticket = tickets.put(make_ticket(customer.user_id, status=TicketStatus.RESOLVED))

        first = summarize(client, ticket.ticket_id, auth_headers(customer))
        assert first.status_code == 200
        assert first.json() == {
            "success": True,
            "summary": "Customer could not print; support replaced the fuser.",
            "outcome": "generated",
        }

        second = summarize(client, ticket.ticket_id, auth_headers(customer))
        assert second.status_code == 200
        assert second.json()["outcome"] == "already_summarized"
        assert second.json()["summary"] == first.json()["summary"]
        assert len(model.prompts) == 1

    def test_not_resolved_is_200_without_summary(self, client, support, customer, tickets, model, auth_headers):
        ticket = tickets.put(make_ticket(customer.user_id, status=TicketStatus.IN_PROGRESS))
        response = summarize(client, ticket.ticket_id, auth_headers(support))
        assert response.status_code == 200
        assert response.json() == {"success": False, "summary": None, "outcome": "not_resolved"}
        assert model.prompts == []

    def test_missing_ticket_is_404(self, client, support, auth_headers):
        response = summarize(client, "TKT-missing", auth_headers(support))
        assert response.status_code == 404
        assert "error" in response.json()

    def test_other_customers_ticket_is_404(self, client, customer, other_customer, tickets, model, auth_headers):
        ticket = tickets.put(make_ticket(other_customer.user_id, status=TicketStatus.RESOLVED))
        response = summarize(client, ticket.ticket_id, auth_headers(customer))
        assert response.status_code == 404
        assert model.prompts == []

    def test_model_failure_is_500(self, client, support, customer, tickets, model, auth_headers):
        model.responses = [RuntimeError("rate limited")]
        ticket = tickets.put(make_ticket(customer.user_id, status=TicketStatus.RESOLVED))

        response = summarize(client, ticket.ticket_id, auth_headers(support))

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to generate summary"
        assert "details" in body
        assert tickets.rows[ticket.ticket_id].summary is None

    def test_requires_session(self, client, customer, tickets):
        ticket = tickets.put(make_ticket(customer.user_id, status=TicketStatus.RESOLVED))
        assert summarize(client, ticket.ticket_id, {}).status_code == 401
