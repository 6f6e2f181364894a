"""Timezone-aware date/time helpers for the hotel booking core."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context


def get_timezone() -> ZoneInfo:
    """Get the configured timezone (UTC outside an application context)."""
    tz_name = current_app.config.get('TIMEZONE', 'UTC') if has_app_context() else 'UTC'
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def iter_days(start: date, end: date):
    """Yield every calendar day from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
