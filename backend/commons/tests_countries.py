"""
Unit Tests for Country Translation
==================================
"""

from django.test import TestCase

from commons.countries import (
    CountryNotFound,
    CountryTranslation,
    UnsupportedLanguage,
    load_country_translations,
)


class CountryTranslationTests(TestCase):
    """Tests for the CountryTranslation service."""

    def setUp(self):
        self.service = CountryTranslation()

    def test_translate_in_french(self):
        self.assertEqual(self.service.get_country_translation('cm', 'fr'), 'Cameroun')
        self.assertEqual(self.service.get_country_translation_in_french('us'), 'États-Unis')

    def test_translate_in_english(self):
        self.assertEqual(self.service.get_country_translation('cm', 'en'), 'Cameroon')
        self.assertEqual(self.service.get_country_translation_in_english('gb'), 'United Kingdom')

    def test_country_code_is_case_insensitive(self):
        self.assertEqual(self.service.get_country_translation('CM', 'en'), 'Cameroon')

    def test_unknown_language_raises(self):
        with self.assertRaises(UnsupportedLanguage):
            self.service.get_country_translation('cm', 'de')

    def test_unknown_country_raises(self):
        with self.assertRaises(CountryNotFound):
            self.service.get_country_translation('zz', 'fr')

    def test_lookup_errors_are_lookup_errors(self):
        with self.assertRaises(LookupError):
            self.service.get_country_translation('zz', 'en')

    def test_both_languages_cover_same_countries(self):
        table = load_country_translations()
        self.assertEqual(set(table['fr']), set(table['en']))

    def test_table_is_read_only(self):
        table = load_country_translations()
        with self.assertRaises(TypeError):
            table['en']['cm'] = 'Somewhere else'

    def test_table_is_loaded_once(self):
        self.assertIs(load_country_translations(), CountryTranslation().country_translations)
