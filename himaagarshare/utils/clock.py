"""Time helpers shared by models and services."""

from datetime import UTC, date, datetime


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


def today() -> date:
    """Current local calendar date."""
    return date.today()
