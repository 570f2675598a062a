"""
Unit Tests for Test Scaffolding
===============================
"""

from types import SimpleNamespace

from django.test import TestCase

from commons.testing import SPECIALITIES, random_specialities, util_batch_test


def respond(status_code):
    return SimpleNamespace(status_code=status_code)


class RandomSpecialitiesTests(TestCase):

    def test_returns_distinct_known_specialities(self):
        for _ in range(20):
            picked = random_specialities()
            self.assertGreaterEqual(len(picked), 1)
            self.assertEqual(len(picked), len(set(picked)))
            self.assertTrue(set(picked) <= set(SPECIALITIES))


class BatchTestTests(TestCase):

    def setUp(self):
        self.user = SimpleNamespace(role='doctor')
        self.allowed = {'own-patient', 'own-invoice'}

    def check_access(self, user, param):
        return respond(200 if param in self.allowed else 403)

    def test_passes_when_statuses_match(self):
        util_batch_test(self.user, self.check_access, ['own-patient', 'own-invoice'], ['other-patient'])

    def test_fails_when_allowed_param_is_forbidden(self):
        with self.assertRaises(AssertionError):
            util_batch_test(self.user, self.check_access, ['other-patient'], [])

    def test_fails_when_forbidden_param_is_allowed(self):
        with self.assertRaises(AssertionError):
            util_batch_test(self.user, self.check_access, [], ['own-patient'])

    def test_params_must_be_lists(self):
        with self.assertRaises(TypeError):
            util_batch_test(self.user, self.check_access, 'own-patient', [])
