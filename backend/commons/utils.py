"""
Reusable helpers for the microservices: short urls, hashing, random
strings and date ranges for statistics graphs.
"""

import hashlib
import json
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from django.conf import settings
from django.core.cache import cache
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import dateformat, timezone, translation
from django.utils.crypto import get_random_string

logger = logging.getLogger(__name__)

# Request cache lifetime in seconds
REQUEST_CACHE_AGE = 180

MIN_RECOMMANDATION_AMOUNT = 8

SHORT_URL_TTL = timedelta(days=30)


class UrlShortener:
    """
    Short links backed by the cache.

    A link lives 30 days: {SHORT_URL_BASE}{prefix}{code}
    """

    code_length = 3

    def __init__(self, prefix: Optional[str] = 'l'):
        self.prefix = prefix or ''

    @staticmethod
    def _cache_key(code: str) -> str:
        return f"{code}_short"

    def shorten_url(self, url: str) -> str:
        code = generate_random_string(self.code_length)
        cache.set(self._cache_key(code), url, int(SHORT_URL_TTL.total_seconds()))
        logger.debug(f"Shortened {url} as {code}")
        return f"{settings.SHORT_URL_BASE}{self.prefix}{code}"

    def expand(self, short_code: str) -> Optional[str]:
        """Return the url behind a short code (with or without prefix)."""
        code = short_code.rsplit('/', 1)[-1]
        if self.prefix and code.startswith(self.prefix):
            code = code[len(self.prefix):]
        return cache.get(self._cache_key(code))


def object_hash(obj) -> str:
    """SHA-256 of a canonical JSON dump of obj."""
    serialized = json.dumps(obj, sort_keys=True, cls=DjangoJSONEncoder)
    return hashlib.sha256(serialized.encode('utf-8')).hexdigest()


def generate_random_string(length: int = 10) -> str:
    return get_random_string(length)


def format_graph_date(value, locale: str, has_day: bool = True) -> str:
    """
    Format a date for graph labels, e.g. '5th March 2024' or 'March 2024'.

    Month names follow the given locale.
    """
    with translation.override(locale):
        return dateformat.format(value, 'jS F Y' if has_day else 'F Y')


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999999)


def _parse_day(value: str) -> datetime:
    day = date.fromisoformat(value)
    return timezone.make_aware(datetime.combine(day, time.min))


def format_graph_date_period(
    period: str,
    start_at: Optional[str] = None,
    end_at: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime, str]:
    """
    Compute the start and end of a statistics period.

    Args:
        period: 'day', 'seven_day', 'month', 'year' or anything else for a
            custom range
        start_at: Custom range start (YYYY-MM-DD)
        end_at: Custom range end (YYYY-MM-DD)
        now: Reference instant, defaults to the current local time

    Returns:
        tuple: (start, end, period). A custom range of 30 days or more is
        reported as 'year' so graphs group it by month.
    """
    now = timezone.localtime(now)
    start, end = now, now

    if period == 'day':
        start = _start_of_day(now)
    elif period == 'seven_day':
        start = _start_of_day(now - timedelta(days=now.weekday()))
    elif period == 'month':
        start = _start_of_day(now.replace(day=1))
    elif period == 'year':
        start = _start_of_day(now.replace(month=1, day=1))
    else:
        if not start_at or not end_at:
            raise ValueError("A custom period needs both start_at and end_at.")
        start = _parse_day(start_at)
        end = _end_of_day(_parse_day(end_at))
        if (end - start).days >= 30:
            period = 'year'

    return start, end, period


def get_dates_between_two_dates(
    start: datetime,
    end: datetime,
    step: timedelta,
    is_first: bool = False,
    add_end_date: bool = False,
) -> List[datetime]:
    """
    List the instants between two dates, every step.

    By default both bounds are left out. is_first keeps the start (every
    point but the last generated one), add_end_date keeps the end (every
    point but the first one).
    """
    if step <= timedelta(0):
        raise ValueError("step must be positive")

    points = []
    current = start
    while current <= end:
        points.append(current)
        current += step

    last_index = len(points) - 1
    return [
        point for index, point in enumerate(points)
        if (point != start and point != end)
        or (is_first and index < last_index)
        or (add_end_date and index > 0)
    ]
