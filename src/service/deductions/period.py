"""Settlement period helpers."""

from datetime import datetime
from zoneinfo import ZoneInfo


def settlement_period(moment: datetime, timezone: str) -> str:
    """
    Return the "YYYY-MM" period a run at `moment` settles.

    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=ZoneInfo("UTC"))
    local = moment.astimezone(ZoneInfo(timezone))
    return f"{local.year:04d}-{local.month:02d}"


def current_period(timezone: str) -> str:
    """Return the period for the current wall-clock time."""
    return settlement_period(datetime.now(ZoneInfo("UTC")), timezone)
