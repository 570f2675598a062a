"""
Unit Tests for Formatting Helpers
=================================
"""

from django.test import TestCase, override_settings

from commons.formatting import (
    ceil_amount,
    error_debug_only,
    floor_amount,
    format_phone_number,
    round_to_nearest,
)


class PhoneNumberTests(TestCase):

    def test_international_prefix_becomes_plus(self):
        self.assertEqual(format_phone_number('00 237 699-12-34-56'), '+237699123456')

    def test_leading_plus_is_kept(self):
        self.assertEqual(format_phone_number('+237 (699) 12.34.56'), '+237699123456')

    def test_inner_plus_and_slashes_are_dropped(self):
        self.assertEqual(format_phone_number('699/12\\34+56'), '699123456')

    def test_local_number_is_untouched(self):
        self.assertEqual(format_phone_number('0699123456'), '0699123456')

    def test_bare_double_zero_is_kept(self):
        self.assertEqual(format_phone_number('00'), '00')


class AmountTests(TestCase):

    def test_round_to_nearest_keeps_multiples(self):
        self.assertEqual(round_to_nearest(10), 10)
        self.assertEqual(round_to_nearest(10.4), 10)

    def test_round_to_nearest_moves_up(self):
        self.assertEqual(round_to_nearest(12), 15)
        self.assertEqual(round_to_nearest(16), 20)

    def test_round_to_nearest_custom_step(self):
        self.assertEqual(round_to_nearest(1234, step=100), 1300)
        self.assertEqual(round_to_nearest(1200, step=100), 1200)

    def test_round_half_away_from_zero(self):
        self.assertEqual(round_to_nearest(2.5), 5)
        self.assertEqual(round_to_nearest(4.5), 5)

    def test_floor_and_ceil(self):
        self.assertEqual(floor_amount(7.9), 7)
        self.assertEqual(ceil_amount(7.1), 8)
        self.assertIsInstance(floor_amount(7.9), int)


class DebugOnlyTests(TestCase):

    @override_settings(DEBUG=True)
    def test_error_visible_in_debug(self):
        self.assertEqual(error_debug_only('boom'), 'boom')

    @override_settings(DEBUG=False)
    def test_error_hidden_in_production(self):
        self.assertIsNone(error_debug_only('boom'))
