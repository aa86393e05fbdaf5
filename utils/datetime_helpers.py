"""
Local clock for the rental desk.

"Today" decides whether a new rental starts active and which active rentals
are already in progress, so it must follow the shop's TIMEZONE setting
rather than the server clock.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """The shop's timezone (config TIMEZONE)."""
    return ZoneInfo(current_app.config.get('TIMEZONE', 'Asia/Bangkok'))


def get_now() -> datetime:
    return datetime.now(get_timezone())


def get_today() -> date:
    """Calendar date at the shop."""
    return get_now().date()


def get_timestamp() -> str:
    """Current local time as stored in TIMESTAMP columns (YYYY-MM-DD HH:MM:SS)."""
    return get_now().strftime('%Y-%m-%d %H:%M:%S')
