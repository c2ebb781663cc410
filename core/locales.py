"""
Supported site locales.

The page is published in English and German. English is the primary
locale and the fallback for anything unrecognised.
"""

LOCALES = ('en', 'de')
DEFAULT_LOCALE = 'en'

LOCALE_LABELS = {
    'en': 'English',
    'de': 'Deutsch',
}


def resolve_locale(locale):
    """Return a supported locale code, falling back to the default."""
    if not locale:
        return DEFAULT_LOCALE
    locale = str(locale).strip().lower()
    if locale in LOCALES:
        return locale
    # Accept region variants such as de-DE or en_US
    language = locale.replace('_', '-').split('-')[0]
    if language in LOCALES:
        return language
    return DEFAULT_LOCALE


def is_german(locale) -> bool:
    """
    Binary language switch used by the email templates.

    Only an exact 'de' selects German; every other value, including
    unknown codes, gets the English text.
    """
    return locale == 'de'
