"""
Unit Tests for Daily Upload Quotas
==================================
Tests cover:
- Accumulation per user and per address
- Short-circuit on user quota
- Daily window expiry
- Input validation
- Concurrent increments on one counter
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone as dt_timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

from django.core.cache import caches
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.utils import timezone

from files.exceptions import InvalidInput
from files.services import CacheCounterStore, QuotaService
from files.services.quota import (
    BYTES_PER_MB,
    get_size_in_mb,
    is_max_file_size,
    seconds_until_midnight,
)

MB = BYTES_PER_MB


class NaiveCounterStore(CacheCounterStore):
    """Read-then-write counter, kept to show the lost update it suffers."""

    def __init__(self, cache, barrier):
        super().__init__(cache)
        self.barrier = barrier

    def add_and_get(self, key, delta, timeout):
        total = self.get(key) + delta
        # Every worker reads before anyone writes
        self.barrier.wait()
        self.cache.set(key, total, timeout)
        return total


@override_settings(TIME_ZONE='UTC')
class QuotaServiceTests(TestCase):
    """Tests for the QuotaService class."""

    def setUp(self):
        self.cache = caches['default']
        self.cache.clear()
        self.service = QuotaService(store=CacheCounterStore(self.cache))

    def tearDown(self):
        self.cache.clear()

    # ===================
    # Accumulation Tests
    # ===================

    def test_first_upload_under_limit_is_admitted(self):
        """6MB against a 10MB limit is admitted and recorded."""
        exceeded = self.service.check_and_record(6 * MB, '10.0.0.1', user='42', daily_limit=10)

        self.assertFalse(exceeded)
        self.assertEqual(self.service.user_usage_mb('42'), 6)
        self.assertEqual(self.service.address_usage_mb('10.0.0.1'), 6)

    def test_upload_crossing_limit_is_recorded(self):
        """The upload that crosses the limit still counts."""
        self.service.check_and_record(6 * MB, '10.0.0.1', user='42', daily_limit=10)

        exceeded = self.service.check_and_record(5 * MB, '10.0.0.1', user='42', daily_limit=10)

        self.assertTrue(exceeded)
        self.assertEqual(self.service.user_usage_mb('42'), 11)

    def test_user_over_limit_skips_address_counter(self):
        """When the user counter is over the limit the address is not charged."""
        self.service.check_and_record(6 * MB, '10.0.0.1', user='42', daily_limit=10)
        self.service.check_and_record(5 * MB, '10.0.0.1', user='42', daily_limit=10)

        self.assertEqual(self.service.address_usage_mb('10.0.0.1'), 6)

    def test_limit_is_strictly_greater(self):
        """Reaching the limit exactly is still allowed."""
        exceeded = self.service.check_and_record(10 * MB, '10.0.0.1', daily_limit=10)

        self.assertFalse(exceeded)

    def test_anonymous_upload_only_charges_address(self):
        """Without a user only the address counter moves."""
        exceeded = self.service.check_and_record(3 * MB, '10.0.0.2', daily_limit=10)

        self.assertFalse(exceeded)
        self.assertEqual(self.service.address_usage_mb('10.0.0.2'), 3)

    def test_address_exceeded_while_user_under_limit(self):
        """Users sharing an address are capped by the address total."""
        self.service.check_and_record(6 * MB, '10.0.0.3', user='alice', daily_limit=10)

        exceeded = self.service.check_and_record(5 * MB, '10.0.0.3', user='bob', daily_limit=10)

        self.assertTrue(exceeded)
        self.assertEqual(self.service.user_usage_mb('bob'), 5)
        self.assertEqual(self.service.address_usage_mb('10.0.0.3'), 11)

    def test_user_exceeded_while_address_under_limit(self):
        """A user hopping addresses is capped by the user total."""
        self.service.check_and_record(6 * MB, '10.0.0.4', user='carol', daily_limit=10)

        exceeded = self.service.check_and_record(5 * MB, '10.0.0.5', user='carol', daily_limit=10)

        self.assertTrue(exceeded)
        self.assertEqual(self.service.address_usage_mb('10.0.0.4'), 6)
        self.assertEqual(self.service.address_usage_mb('10.0.0.5'), 0)

    def test_user_instance_is_keyed_by_pk(self):
        """Model instances are keyed by their primary key."""
        user = SimpleNamespace(pk=7)

        self.service.check_and_record(1 * MB, '10.0.0.6', user=user, daily_limit=10)

        self.assertEqual(QuotaService.user_key(user), 'upload_quota:user:7')
        self.assertEqual(self.service.user_usage_mb(7), 1)

    @override_settings(UPLOAD_DAILY_LIMIT_MB=1)
    def test_default_limit_comes_from_settings(self):
        """daily_limit defaults to UPLOAD_DAILY_LIMIT_MB."""
        self.assertTrue(self.service.check_and_record(2 * MB, '10.0.0.7'))

    def test_check_file_uses_declared_size(self):
        """check_file charges the uploaded file's size."""
        file_obj = SimpleUploadedFile('scan.pdf', b'x' * 2048)

        self.service.check_file(file_obj, '10.0.0.8', daily_limit=10)

        self.assertEqual(self.service.address_usage_mb('10.0.0.8'), 2048 / MB)

    # ===================
    # Window Tests
    # ===================

    def test_expired_counter_reads_as_zero(self):
        """A counter past its expiry starts over."""
        key = QuotaService.address_key('10.0.1.1')
        self.cache.set(key, 50 * MB, timeout=-1)

        exceeded = self.service.check_and_record(1 * MB, '10.0.1.1', daily_limit=10)

        self.assertFalse(exceeded)
        self.assertEqual(self.service.address_usage_mb('10.0.1.1'), 1)

    def test_counter_expires_at_local_midnight(self):
        """Counters are created with the time left in the day."""
        store = MagicMock()
        store.add_and_get.return_value = 0
        late = timezone.make_aware(datetime(2026, 10, 19, 23, 59, 0))
        service = QuotaService(store=store, clock=lambda: late)

        service.check_and_record(1 * MB, '10.0.1.2', user='dave', daily_limit=10)

        timeouts = [c.args[2] for c in store.add_and_get.call_args_list]
        self.assertEqual(timeouts, [60, 60])

    def test_seconds_until_midnight(self):
        """Expiry is wall-clock midnight, not upload time plus a day."""
        early = timezone.make_aware(datetime(2026, 10, 19, 0, 1, 0))
        late = timezone.make_aware(datetime(2026, 10, 19, 23, 59, 59, 900000))

        self.assertEqual(seconds_until_midnight(early), 24 * 3600 - 60)
        self.assertEqual(seconds_until_midnight(late), 1)

    @override_settings(TIME_ZONE='Africa/Douala')
    def test_seconds_until_midnight_uses_local_time(self):
        """The day boundary follows TIME_ZONE (UTC+1 here)."""
        utc_instant = datetime(2026, 10, 19, 22, 30, 0, tzinfo=dt_timezone.utc)

        self.assertEqual(seconds_until_midnight(utc_instant), 30 * 60)

    # ===================
    # Validation Tests
    # ===================

    def test_empty_address_is_rejected(self):
        with self.assertRaises(InvalidInput):
            self.service.check_and_record(1 * MB, '  ', daily_limit=10)

    def test_negative_size_is_rejected(self):
        with self.assertRaises(InvalidInput):
            self.service.check_and_record(-1, '10.0.2.1', daily_limit=10)

    def test_missing_file_is_rejected(self):
        with self.assertRaises(InvalidInput):
            self.service.check_file(None, '10.0.2.2')

    def test_size_helpers(self):
        file_obj = SimpleUploadedFile('a.bin', b'x' * (MB // 2))

        self.assertEqual(get_size_in_mb(file_obj), 0.5)
        self.assertTrue(is_max_file_size(file_obj, 0.4))
        self.assertFalse(is_max_file_size(file_obj, 0.5))

    def test_store_errors_propagate(self):
        """Counter store failures reach the caller unchanged."""
        store = MagicMock()
        store.add_and_get.side_effect = ConnectionError('cache down')
        service = QuotaService(store=store)

        with self.assertRaises(ConnectionError):
            service.check_and_record(1 * MB, '10.0.2.3', daily_limit=10)

    # ===================
    # Concurrency Tests
    # ===================

    def test_concurrent_uploads_are_all_counted(self):
        """N simultaneous uploads of S leave exactly N x S on the counter."""
        workers, size = 16, 1 * MB
        start = threading.Barrier(workers)

        def upload(_):
            start.wait()
            return self.service.check_and_record(size, '10.0.3.1', daily_limit=1000)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(upload, range(workers)))

        self.assertEqual(self.service.address_usage_mb('10.0.3.1'), workers)

    def test_naive_read_then_write_loses_updates(self):
        """Regression guard: a get-then-set counter under-counts."""
        workers, size = 4, 1 * MB
        service = QuotaService(store=NaiveCounterStore(self.cache, threading.Barrier(workers)))

        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(
                lambda _: service.check_and_record(size, '10.0.3.2', daily_limit=1000),
                range(workers)
            ))

        self.assertLess(self.service.address_usage_mb('10.0.3.2'), workers)
