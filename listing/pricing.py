"""
Asking price display helpers.
"""
from decimal import Decimal, ROUND_HALF_UP

CURRENCY_SYMBOLS = {
    'EUR': '€',
}
DEFAULT_CURRENCY_SYMBOL = '$'


def format_price(amount, currency, locale) -> str:
    """
    Format a whole-number asking price for display.

    German pages group thousands with '.', all others with ','.
    EUR is shown with a euro sign, every other currency with '$'.
    """
    whole = int(Decimal(amount).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    grouped = f"{whole:,}"
    if locale == 'de':
        grouped = grouped.replace(',', '.')
    symbol = CURRENCY_SYMBOLS.get(currency, DEFAULT_CURRENCY_SYMBOL)
    return f"{symbol}{grouped}"
