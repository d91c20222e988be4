"""Timezone policy and calendar-day helpers.

Every day boundary the engine uses ("today", "yesterday", local midnight)
is computed in a single zone: config.TIMEZONE when set, otherwise the
device-local zone. Timestamps are compared as instants, never as strings.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

import config
from models import TimeFrame

logger = logging.getLogger(__name__)


def get_timezone() -> Optional[tzinfo]:
    """The configured zone, or None to follow the device's own rules."""
    if config.TIMEZONE:
        return ZoneInfo(config.TIMEZONE)
    return None


def now() -> datetime:
    tz = get_timezone()
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def to_local(moment: datetime) -> datetime:
    """Aware datetime in the configured zone. Naive input is read as local.

    Without a configured zone each instant gets the device offset in force
    at that instant, so DST changes inside a window are respected.
    """
    tz = get_timezone()
    if tz is None:
        return moment.astimezone()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def parse_timestamp(value: str, kind: str = "action") -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into the configured zone.

    Returns None for unparseable values so one bad record cannot break
    progress computation. `kind` names the record in the warning.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except (TypeError, ValueError):
        logger.warning("Skipping %s with unparseable timestamp %r", kind, value)
        return None
    return to_local(parsed)


def local_date(moment: datetime) -> date:
    return to_local(moment).date()


def start_of_day(moment: datetime) -> datetime:
    local = to_local(moment)
    if get_timezone() is None:
        # Midnight may carry a different offset than `moment`
        return datetime.combine(local.date(), time()).astimezone()
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def window_start(timeframe: Optional[TimeFrame], current: datetime) -> Optional[datetime]:
    """Earliest instant included in `timeframe`; None means unbounded."""
    if timeframe == TimeFrame.DAY:
        return start_of_day(current)
    if timeframe == TimeFrame.WEEK:
        return to_local(current) - timedelta(days=config.WEEK_WINDOW_DAYS)
    if timeframe == TimeFrame.MONTH:
        return to_local(current) - timedelta(days=config.MONTH_WINDOW_DAYS)
    return None
