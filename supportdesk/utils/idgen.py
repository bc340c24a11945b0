"""
Identifiers

Entity ids are a short type prefix plus 12 hex characters of a uuid4,
e.g. TKT-a1b2c3d4e5f6. Correlation ids carry a UTC timestamp so log lines
sort by request start.
"""
import uuid

from .time import utc_now

TICKET_PREFIX = "TKT"
USER_PREFIX = "USR"
MESSAGE_PREFIX = "MSG"


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def generate_ticket_id() -> str:
    return generate_id(TICKET_PREFIX)


def generate_user_id() -> str:
    return generate_id(USER_PREFIX)


def generate_message_id() -> str:
    return generate_id(MESSAGE_PREFIX)


def generate_correlation_id() -> str:
    return f"COR-{utc_now():%Y%m%d%H%M%S}-{uuid.uuid4().hex[:8]}"
