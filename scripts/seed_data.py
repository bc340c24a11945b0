"""
Seed Data Script - Creates demo profiles and tickets
Run: python -m scripts.seed_data
"""
import asyncio

from supportdesk.config.settings import settings
from supportdesk.domain.enums import Role, TicketPriority, TicketStatus
from supportdesk.domain.models import Message, Profile, Ticket
from supportdesk.repositories import (
    MessageRepository, ProfileRepository, TicketRepository, create_mongo_client, prepare_database
)
from supportdesk.services.auth_service import hash_password
from supportdesk.utils.idgen import generate_message_id, generate_ticket_id, generate_user_id
from supportdesk.utils.time import utc_now

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    ("admin@example.com", "Demo Admin", Role.ADMIN),
    ("support@example.com", "Demo Support", Role.SUPPORT),
    ("customer@example.com", "Demo Customer", Role.CUSTOMER),
]

DEMO_TICKETS = [
    ("Cannot log in to billing portal", "The portal says my password is wrong after the reset.", TicketPriority.HIGH),
    ("Invoice shows wrong address", "Our new office address is not on the March invoice.", TicketPriority.MEDIUM),
    ("Feature request: CSV export", "We would like to export ticket history as CSV.", TicketPriority.LOW),
]


async def create_profiles(profiles: ProfileRepository) -> dict:
    """Create the demo users unless they exist; returns user ids by role"""
    ids = {}
    for email, name, role in DEMO_USERS:
        existing = await profiles.get_by_email(email)
        if existing:
            print(f"Profile exists: {email}")
            ids[role] = existing.user_id
            continue
        now = utc_now()
        profile = Profile(
            user_id=generate_user_id(),
            email=email,
            full_name=name,
            role=role,
            password_hash=hash_password(DEMO_PASSWORD),
            created_at=now,
            updated_at=now,
        )
        await profiles.create_profile(profile)
        print(f"Created {role.value}: {email}")
        ids[role] = profile.user_id
    return ids


async def create_tickets(tickets: TicketRepository, messages: MessageRepository, ids: dict) -> None:
    customer_id = ids[Role.CUSTOMER]
    if await tickets.count_tickets(customer_id=customer_id) > 0:
        print("Demo customer already has tickets. Skipping.")
        return

    for title, description, priority in DEMO_TICKETS:
        now = utc_now()
        ticket = Ticket(
            ticket_id=generate_ticket_id(),
            title=title,
            description=description,
            status=TicketStatus.OPEN,
            priority=priority,
            customer_id=customer_id,
            assigned_to=ids[Role.SUPPORT],
            created_at=now,
            updated_at=now,
        )
        await tickets.create_ticket(ticket)
        await messages.add_message(Message(
            message_id=generate_message_id(),
            ticket_id=ticket.ticket_id,
            sender_id=customer_id,
            sender_role=Role.CUSTOMER,
            content=description,
            created_at=now,
        ))
        print(f"Created ticket: {ticket.ticket_id}")


async def seed() -> None:
    client = create_mongo_client(settings)
    db = client[settings.mongo_db]
    try:
        await prepare_database(db)
        ids = await create_profiles(ProfileRepository(db))
        await create_tickets(TicketRepository(db), MessageRepository(db), ids)
    finally:
        client.close()


def main():
    print("=== Seeding database ===")
    print("-" * 40)
    asyncio.run(seed())
    print("-" * 40)
    print(f"Done! Demo users sign in with password '{DEMO_PASSWORD}'")


if __name__ == "__main__":
    main()
