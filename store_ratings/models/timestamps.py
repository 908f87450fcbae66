"""Timestamp helpers shared by the models and repositories."""
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Current UTC time as the ISO-8601 text stored in timestamp columns."""
    return datetime.now(tz=timezone.utc).isoformat()


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware values pass through unchanged."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def parse_timestamp(raw: str) -> datetime:
    """Parse a stored timestamp, treating values without an offset as UTC."""
    return as_utc(datetime.fromisoformat(raw))
