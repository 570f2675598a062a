"""
Unit Tests for Utility Helpers
==============================
Tests cover:
- Short urls
- Object hashing and random strings
- Graph date labels and periods
- Date ranges between two dates
"""

from datetime import date, datetime, timedelta

from django.core.cache import cache
from django.test import TestCase, override_settings
from django.utils import timezone

from commons.utils import (
    UrlShortener,
    format_graph_date,
    format_graph_date_period,
    generate_random_string,
    get_dates_between_two_dates,
    object_hash,
)


@override_settings(SHORT_URL_BASE='http://s.example.test/')
class UrlShortenerTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_shorten_url_uses_base_and_prefix(self):
        short = UrlShortener(prefix='x').shorten_url('https://example.test/consultation/42')

        self.assertTrue(short.startswith('http://s.example.test/x'))
        self.assertEqual(len(short), len('http://s.example.test/x') + 3)

    def test_expand_returns_original_url(self):
        shortener = UrlShortener()
        short = shortener.shorten_url('https://example.test/invoice/7')

        self.assertEqual(shortener.expand(short), 'https://example.test/invoice/7')

    def test_expand_unknown_code(self):
        self.assertIsNone(UrlShortener().expand('lzzz'))


class HashingTests(TestCase):

    def test_object_hash_ignores_key_order(self):
        self.assertEqual(
            object_hash({'a': 1, 'b': [1, 2]}),
            object_hash({'b': [1, 2], 'a': 1})
        )

    def test_object_hash_differs_for_different_objects(self):
        self.assertNotEqual(object_hash({'a': 1}), object_hash({'a': 2}))

    def test_object_hash_handles_dates(self):
        self.assertEqual(len(object_hash({'day': date(2024, 3, 5)})), 64)

    def test_generate_random_string_length(self):
        self.assertEqual(len(generate_random_string()), 10)
        self.assertEqual(len(generate_random_string(3)), 3)


class GraphDateTests(TestCase):

    def test_format_with_day(self):
        self.assertEqual(format_graph_date(date(2024, 3, 5), 'en'), '5th March 2024')

    def test_format_without_day(self):
        self.assertEqual(format_graph_date(date(2024, 3, 5), 'en', has_day=False), 'March 2024')

    def test_format_in_french(self):
        self.assertIn('mars', format_graph_date(date(2024, 3, 5), 'fr', has_day=False).lower())


@override_settings(TIME_ZONE='UTC')
class GraphPeriodTests(TestCase):

    def setUp(self):
        # Thursday afternoon
        self.now = timezone.make_aware(datetime(2024, 3, 14, 15, 30))

    def test_day_period(self):
        start, end, period = format_graph_date_period('day', now=self.now)

        self.assertEqual(start, timezone.make_aware(datetime(2024, 3, 14)))
        self.assertEqual(end, self.now)
        self.assertEqual(period, 'day')

    def test_seven_day_period_starts_on_monday(self):
        start, _, _ = format_graph_date_period('seven_day', now=self.now)

        self.assertEqual(start, timezone.make_aware(datetime(2024, 3, 11)))

    def test_month_and_year_periods(self):
        month_start, _, _ = format_graph_date_period('month', now=self.now)
        year_start, _, _ = format_graph_date_period('year', now=self.now)

        self.assertEqual(month_start, timezone.make_aware(datetime(2024, 3, 1)))
        self.assertEqual(year_start, timezone.make_aware(datetime(2024, 1, 1)))

    def test_custom_short_range_keeps_period(self):
        start, end, period = format_graph_date_period('custom', '2024-01-01', '2024-01-10')

        self.assertEqual(start, timezone.make_aware(datetime(2024, 1, 1)))
        self.assertEqual(end, timezone.make_aware(datetime(2024, 1, 10, 23, 59, 59, 999999)))
        self.assertEqual(period, 'custom')

    def test_custom_long_range_switches_to_year(self):
        _, _, period = format_graph_date_period('custom', '2024-01-01', '2024-03-01')

        self.assertEqual(period, 'year')

    def test_custom_range_needs_both_bounds(self):
        with self.assertRaises(ValueError):
            format_graph_date_period('custom', '2024-01-01')


class DatesBetweenTests(TestCase):

    def setUp(self):
        self.start = datetime(2024, 1, 1)
        self.end = datetime(2024, 1, 5)
        self.step = timedelta(days=1)

    def _days(self, dates):
        return [d.day for d in dates]

    def test_bounds_excluded_by_default(self):
        dates = get_dates_between_two_dates(self.start, self.end, self.step)

        self.assertEqual(self._days(dates), [2, 3, 4])

    def test_is_first_keeps_start(self):
        dates = get_dates_between_two_dates(self.start, self.end, self.step, is_first=True)

        self.assertEqual(self._days(dates), [1, 2, 3, 4])

    def test_add_end_date_keeps_end(self):
        dates = get_dates_between_two_dates(self.start, self.end, self.step, add_end_date=True)

        self.assertEqual(self._days(dates), [2, 3, 4, 5])

    def test_step_must_be_positive(self):
        with self.assertRaises(ValueError):
            get_dates_between_two_dates(self.start, self.end, timedelta(0))
