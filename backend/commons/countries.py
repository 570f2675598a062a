"""
Country Translation Service
===========================
Translates country names from an ISO 3166-1 alpha-2 code into a target
language. French and English are available.

The table lives in data/countries.json and is loaded once per process.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)

DATA_FILE = Path(__file__).resolve().parent / 'data' / 'countries.json'


class UnsupportedLanguage(LookupError):
    """The requested language has no country table."""


class CountryNotFound(LookupError):
    """The country code is unknown for the requested language."""


@lru_cache(maxsize=None)
def load_country_translations():
    """
    Load the translation table as a read-only mapping.

    Returns:
        MappingProxyType: language code -> (country code -> name)
    """
    with open(DATA_FILE, encoding='utf-8') as fh:
        raw = json.load(fh)
    logger.debug(f"Loaded country translations for {sorted(raw)}")
    return MappingProxyType({
        language: MappingProxyType(dict(names))
        for language, names in raw.items()
    })


class CountryTranslation:
    """Lookup of country names by code and language."""

    available_languages = ('fr', 'en')

    def __init__(self):
        self.country_translations = load_country_translations()

    def get_country_translation(self, country_code: str, language_code: str) -> str:
        """
        Get the name of a country in the given language.

        Args:
            country_code: Country code, e.g. 'cm' (case-insensitive)
            language_code: Target language, 'fr' or 'en'

        Returns:
            str: Country name

        Raises:
            UnsupportedLanguage: language is not available
            CountryNotFound: no translation for this country
        """
        if language_code not in self.available_languages:
            raise UnsupportedLanguage(
                f"Language {language_code} is not available for translation."
            )

        names = self.country_translations[language_code]
        try:
            return names[country_code.lower()]
        except KeyError:
            raise CountryNotFound(
                f"No translation for country {country_code} in language {language_code}."
            ) from None

    def get_country_translation_in_english(self, country_code: str) -> str:
        return self.get_country_translation(country_code, 'en')

    def get_country_translation_in_french(self, country_code: str) -> str:
        return self.get_country_translation(country_code, 'fr')
