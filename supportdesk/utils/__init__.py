"""Utility modules"""
from .logger import get_logger, setup_logging
from .jwt import SessionTokenCodec
from .idgen import generate_id, generate_correlation_id
from .time import utc_now

__all__ = [
    "get_logger",
    "setup_logging",
    "SessionTokenCodec",
    "generate_id",
    "generate_correlation_id",
    "utc_now",
]
