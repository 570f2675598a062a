"""
Upload Quota Service
====================
Daily upload volume per user and per network address.

Algorithm (check_and_record):
1. Convert the upload size to megabytes
2. Compute the time left until local midnight: the counters' expiry
3. With a user: add the size to the user counter; over the limit -> True
   (the address counter is left untouched on that path)
4. Add the size to the address counter and compare it to the limit

Every attempt is recorded, including the one that crosses the limit.
"""

import logging
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from typing import Optional

from django.conf import settings
from django.utils import timezone

from ..exceptions import InvalidInput
from .counters import CacheCounterStore

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1048576


def get_daily_limit_mb():
    """Get the daily upload limit from settings, default 200MB."""
    return getattr(settings, 'UPLOAD_DAILY_LIMIT_MB', 200)


def get_size_in_mb(file_obj) -> float:
    """Declared size of an uploaded file in megabytes."""
    return file_obj.size / BYTES_PER_MB


def is_max_file_size(file_obj, max_size: float) -> bool:
    """True if the file is strictly larger than max_size megabytes."""
    return get_size_in_mb(file_obj) > max_size


def seconds_until_midnight(now: Optional[datetime] = None) -> int:
    """
    Seconds left until the next local midnight (at least 1).

    The day boundary follows settings.TIME_ZONE.
    """
    local_now = timezone.localtime(now)
    midnight = (local_now + timedelta(days=1)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    remaining = midnight.astimezone(dt_timezone.utc) - local_now.astimezone(dt_timezone.utc)
    return max(1, int(remaining.total_seconds()))


class QuotaService:
    """
    Daily upload quota ledger.

    Counters hold bytes and live in a shared cache so every worker sees
    the same totals.
    """

    key_prefix = 'upload_quota'

    def __init__(self, store=None, clock=timezone.now):
        self.store = store if store is not None else CacheCounterStore()
        self.clock = clock

    @classmethod
    def user_key(cls, user) -> str:
        user_id = getattr(user, 'pk', user)
        return f"{cls.key_prefix}:user:{user_id}"

    @classmethod
    def address_key(cls, address: str) -> str:
        return f"{cls.key_prefix}:address:{address}"

    def user_usage_mb(self, user) -> float:
        return self.store.get(self.user_key(user)) / BYTES_PER_MB

    def address_usage_mb(self, address: str) -> float:
        return self.store.get(self.address_key(address)) / BYTES_PER_MB

    def _record(self, key: str, size: int, timeout: int, daily_limit: float) -> bool:
        total_mb = self.store.add_and_get(key, size, timeout) / BYTES_PER_MB
        exceeded = total_mb > daily_limit
        if exceeded:
            logger.info(
                f"Daily upload limit exceeded for {key}: "
                f"{total_mb:.2f}MB > {daily_limit}MB"
            )
        return exceeded

    def check_and_record(
        self,
        file_size: int,
        address: str,
        user=None,
        daily_limit: Optional[float] = None,
    ) -> bool:
        """
        Record an upload and tell whether the daily limit is exceeded.

        Args:
            file_size: Upload size in bytes
            address: Client network address
            user: Authenticated user (instance or id), None for anonymous
            daily_limit: Limit in megabytes, defaults to UPLOAD_DAILY_LIMIT_MB

        Returns:
            bool: True if the user or the address is over the limit

        Raises:
            InvalidInput: empty address or invalid size
        """
        if not isinstance(address, str) or not address.strip():
            raise InvalidInput("A client address is required.")
        if isinstance(file_size, bool) or not isinstance(file_size, int) or file_size < 0:
            raise InvalidInput(f"Invalid file size: {file_size!r}")

        if daily_limit is None:
            daily_limit = get_daily_limit_mb()
        timeout = seconds_until_midnight(self.clock())

        if user:
            # The address counter is not charged once the user is over
            # the limit.
            if self._record(self.user_key(user), file_size, timeout, daily_limit):
                return True

        return self._record(self.address_key(address), file_size, timeout, daily_limit)

    def check_file(self, file_obj, address: str, user=None, daily_limit: Optional[float] = None) -> bool:
        """check_and_record using the declared size of an uploaded file."""
        if file_obj is None:
            raise InvalidInput("No file provided.")
        return self.check_and_record(file_obj.size, address, user=user, daily_limit=daily_limit)
