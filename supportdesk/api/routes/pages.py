"""
Page Routes - HTML UI Pages

Routes:
- Public pages (/, /login, /employee-login, /unauthorized, /logout)
- Customer portal (/customer-dashboard)
- Support portal (/support-dashboard)
- Admin portal (/admin-dashboard)

Access is decided by the access gate middleware before these handlers
run; handlers read the resolved caller from request.state.actor.
"""
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..deps import get_container
from ...container import ServiceContainer
from ...domain.enums import Portal, Role, TicketStatus
from ...domain.errors import AuthenticationError
from ...domain.models import ActorContext

router = APIRouter(tags=["Pages"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))

DASHBOARD_ROWS = 100


def _actor(request: Request) -> ActorContext:
    actor = getattr(request.state, "actor", None)
    if actor is None:
        # Page reached without the gate resolving a role
        raise AuthenticationError("Authentication required")
    return actor


async def _dashboard(request: Request, container: ServiceContainer, template: str, **context):
    actor = _actor(request)
    tickets, total = await container.ticket_service.list_tickets(actor, limit=DASHBOARD_ROWS)
    return templates.TemplateResponse(
        request,
        template,
        {"actor": actor, "tickets": tickets, "total": total, "statuses": list(TicketStatus), **context},
    )


async def _chat(request: Request, container: ServiceContainer, ticket_id: str, portal: str):
    actor = _actor(request)
    ticket = await container.ticket_service.get_visible_ticket(ticket_id, actor)
    messages = await container.message_service.list_messages(ticket_id, actor, limit=200)
    return templates.TemplateResponse(
        request,
        "chat.html",
        {"actor": actor, "ticket": ticket, "messages": messages, "portal": portal},
    )


# =============================================================================
# PUBLIC PAGES
# =============================================================================

@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    """Portal chooser"""
    return templates.TemplateResponse(request, "index.html", {})


@router.get("/login", response_class=HTMLResponse)
def customer_login(request: Request):
    return templates.TemplateResponse(request, "login.html", {"portal": Portal.CUSTOMER.value})


@router.get("/employee-login", response_class=HTMLResponse)
def employee_login(request: Request):
    return templates.TemplateResponse(request, "login.html", {"portal": Portal.EMPLOYEE.value})


@router.get("/unauthorized", response_class=HTMLResponse)
def unauthorized(request: Request):
    return templates.TemplateResponse(request, "unauthorized.html", {}, status_code=403)


@router.get("/logout")
def logout(container: ServiceContainer = Depends(get_container)):
    """Clear the session and go back to the portal chooser"""
    response = RedirectResponse("/", status_code=302)
    response.delete_cookie(container.settings.session_cookie_name)
    return response


# =============================================================================
# CUSTOMER PORTAL
# =============================================================================

@router.get("/customer-dashboard", response_class=HTMLResponse)
@router.get("/customer-dashboard/tickets", response_class=HTMLResponse)
async def customer_dashboard(request: Request, container: ServiceContainer = Depends(get_container)):
    return await _dashboard(request, container, "dashboard.html", portal="customer", can_create=True)


@router.get("/customer-dashboard/tickets/{ticket_id}/chat", response_class=HTMLResponse)
async def customer_ticket_chat(ticket_id: str, request: Request, container: ServiceContainer = Depends(get_container)):
    """Chat thread of one of the customer's own tickets"""
    return await _chat(request, container, ticket_id, portal="customer")


# =============================================================================
# SUPPORT PORTAL
# =============================================================================

@router.get("/support-dashboard", response_class=HTMLResponse)
@router.get("/support-dashboard/tickets", response_class=HTMLResponse)
async def support_dashboard(request: Request, container: ServiceContainer = Depends(get_container)):
    return await _dashboard(request, container, "dashboard.html", portal="support", can_create=False)


@router.get("/support-dashboard/tickets/{ticket_id}/chat", response_class=HTMLResponse)
async def ticket_chat(ticket_id: str, request: Request, container: ServiceContainer = Depends(get_container)):
    return await _chat(request, container, ticket_id, portal="support")


# =============================================================================
# ADMIN PORTAL
# =============================================================================

@router.get("/admin-dashboard", response_class=HTMLResponse)
@router.get("/admin-dashboard/tickets", response_class=HTMLResponse)
async def admin_dashboard(request: Request, container: ServiceContainer = Depends(get_container)):
    actor = _actor(request)
    staff = await container.admin_service.list_staff(actor)
    return await _dashboard(request, container, "dashboard.html", portal="admin", can_create=False, staff=staff)


@router.get("/admin-dashboard/users", response_class=HTMLResponse)
async def admin_users(request: Request, container: ServiceContainer = Depends(get_container)):
    actor = _actor(request)
    staff = await container.admin_service.list_staff(actor)
    return templates.TemplateResponse(
        request,
        "users.html",
        {"actor": actor, "staff": staff, "portal": "admin", "roles": [r.value for r in Role]},
    )
