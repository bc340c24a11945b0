"""
Service Container - application-scoped clients and services

Built once in the app lifespan and stored on app.state.container. Tests
build one from in-memory fakes instead.
"""
from dataclasses import dataclass
from typing import Any, Optional

from .config.settings import Settings
from .gate import AccessGate
from .realtime import ChangeFeed, MongoChangeFeed
from .repositories import (
    MessageRepository, ProfileRepository, TicketRepository, create_mongo_client, health_check
)
from .services import (
    AdminService, AuthService, LangChainSummarizationModel, MessageService,
    SummarizationJob, TicketService, build_chat_model
)
from .utils.jwt import SessionTokenCodec
from .utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    tickets: TicketRepository
    messages: MessageRepository
    profiles: ProfileRepository
    codec: SessionTokenCodec
    auth: AuthService
    gate: AccessGate
    ticket_service: TicketService
    message_service: MessageService
    admin_service: AdminService
    summarizer: SummarizationJob
    change_feed: ChangeFeed
    mongo_client: Optional[Any] = None
    db: Optional[Any] = None

    async def health(self) -> dict:
        if self.mongo_client is None:
            return {"status": "healthy", "database": "in-memory", "connection": "ok"}
        return await health_check(self.mongo_client, self.settings.mongo_db)

    def close(self) -> None:
        if self.mongo_client is not None:
            self.mongo_client.close()
            logger.info("MongoDB connection closed")


def wire_container(
    settings: Settings,
    tickets: TicketRepository,
    messages: MessageRepository,
    profiles: ProfileRepository,
    change_feed: ChangeFeed,
    model: Optional[Any] = None,
    mongo_client: Optional[Any] = None,
    db: Optional[Any] = None
) -> ServiceContainer:
    """Assemble services on top of the given storage and change feed"""
    codec = SessionTokenCodec(
        settings.session_secret,
        algorithm=settings.session_algorithm,
        ttl_minutes=settings.session_ttl_minutes,
    )
    auth = AuthService(codec, profiles)
    ticket_service = TicketService(tickets, messages, profiles)

    return ServiceContainer(
        settings=settings,
        tickets=tickets,
        messages=messages,
        profiles=profiles,
        codec=codec,
        auth=auth,
        gate=AccessGate(auth),
        ticket_service=ticket_service,
        message_service=MessageService(messages, ticket_service),
        admin_service=AdminService(profiles, tickets),
        summarizer=SummarizationJob(
            tickets,
            messages,
            model,
            chunk_size=settings.summary_chunk_size,
            chunk_overlap=settings.summary_chunk_overlap,
        ),
        change_feed=change_feed,
        mongo_client=mongo_client,
        db=db,
    )


def build_container(settings: Settings) -> ServiceContainer:
    """Create the MongoDB-backed container"""
    client = create_mongo_client(settings)
    db = client[settings.mongo_db]

    model = None
    llm = build_chat_model(settings)
    if llm is not None:
        model = LangChainSummarizationModel(llm, timeout_seconds=settings.summarization_timeout_seconds)

    return wire_container(
        settings,
        tickets=TicketRepository(db),
        messages=MessageRepository(db),
        profiles=ProfileRepository(db),
        change_feed=MongoChangeFeed(db),
        model=model,
        mongo_client=client,
        db=db,
    )
