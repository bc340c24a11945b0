"""Time Utilities"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current UTC time; all stored timestamps use this"""
    return datetime.now(timezone.utc)
