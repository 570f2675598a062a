"""
Formatting helpers shared across services.
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

# Keep a leading '+' and every digit, drop anything else
NON_DIGITS = re.compile(r'^(\+)|\D')
INTERNATIONAL_PREFIX = re.compile(r'^0{2}(?!$)')


def format_phone_number(phone_number: str) -> str:
    """
    Normalize a phone number.

    Strips every non-digit character except a leading '+', then turns a
    leading '00' international prefix into '+'.

    >>> format_phone_number('00 237 (6) 99-12-34-56')
    '+237699123456'
    """
    digits = NON_DIGITS.sub(r'\1', phone_number)
    return INTERNATIONAL_PREFIX.sub('+', digits, count=1)


def error_debug_only(error):
    """Return the error outside production (DEBUG), None otherwise."""
    return error if settings.DEBUG else None


def _round_half_up(amount: float) -> float:
    return float(Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def round_to_nearest(amount: float, step: int = 5) -> float:
    """
    Round an amount to a multiple of step, used for suggested prices.

    An amount whose rounded value is already a multiple of step is returned
    rounded. Otherwise half a step is added before rounding, so positive
    amounts move up to the next multiple (12 -> 15, 16 -> 20).
    Halves round away from zero.
    """
    rounded = _round_half_up(amount)
    if int(rounded) % step == 0:
        return rounded
    return _round_half_up((amount + step / 2) / step) * step


def floor_amount(amount: float) -> int:
    return math.floor(amount)


def ceil_amount(amount: float) -> int:
    return math.ceil(amount)
