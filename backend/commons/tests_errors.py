"""
Unit Tests for Error Keys
=========================
"""

from django.test import TestCase

from commons.errors import ErrorKey


class ErrorKeyTests(TestCase):

    def test_values_are_translation_keys(self):
        self.assertTrue(all(key.value.startswith('errors.') for key in ErrorKey))

    def test_values_are_unique(self):
        values = [key.value for key in ErrorKey]
        self.assertEqual(len(values), len(set(values)))

    def test_lookup_by_identifier(self):
        self.assertIs(ErrorKey('errors.max-file-size'), ErrorKey.FILE_TOO_BIG)

    def test_payload_and_str(self):
        self.assertEqual(ErrorKey.NO_FILE.as_payload(), {'error': 'errors.nofile'})
        self.assertEqual(str(ErrorKey.NO_FILE), 'errors.nofile')
