"""Realtime - change feed subscriptions and the ticket lifecycle notifier"""
from .change_feed import ChangeFeed, Subscription, MongoChangeFeed, MongoSubscription, change_from_mongo
from .board import TicketBoard
from .notifier import TicketLifecycleNotifier, is_resolved_transition
from .summarize_client import HttpSummarizeClient

__all__ = [
    "ChangeFeed",
    "Subscription",
    "MongoChangeFeed",
    "MongoSubscription",
    "change_from_mongo",
    "TicketBoard",
    "TicketLifecycleNotifier",
    "is_resolved_transition",
    "HttpSummarizeClient",
]
