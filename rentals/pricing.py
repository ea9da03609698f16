"""
Pricing calculator for rental quotes.

This is the single place where the day count, service fee, insurance and
grand total of a rental are derived. Reservations lock the grand total in
at creation time; previews call the same function.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import AmountOutOfRangeError, InvalidRangeError

SERVICE_FEE_RATE = Decimal('0.05')
INSURANCE_FEE = Decimal('15.00')

CENTS = Decimal('0.01')

# Largest amount RentalTransaction.total_price can store (10 digits, 2 places).
MAX_GRAND_TOTAL = Decimal('99999999.99')


@dataclass(frozen=True)
class Quote:
    days: int
    subtotal: Decimal
    service_fee: Decimal
    insurance: Decimal
    grand_total: Decimal

    def as_dict(self):
        return {
            'days': self.days,
            'subtotal': str(self.subtotal),
            'service_fee': str(self.service_fee),
            'insurance': str(self.insurance),
            'grand_total': str(self.grand_total),
        }


def _money(value):
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_date(value, field_name='date'):
    """
    Coerce a date, datetime or ISO-8601 string to a calendar date.

    Raises:
        InvalidRangeError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            pass
    raise InvalidRangeError(f'Invalid {field_name}: {value!r}. Use the YYYY-MM-DD format.')


def compute_quote(price_per_day, start_date, end_date):
    """
    Compute the price breakdown for renting an item over a date range.

    The range is inclusive: a same-day rental counts as one day.

    Args:
        price_per_day: Positive daily rate (Decimal, int or numeric string)
        start_date: First rental day
        end_date: Last rental day

    Returns:
        Quote: days, subtotal, service fee, insurance and grand total

    Raises:
        InvalidRangeError: If a date fails to parse or end_date < start_date
        AmountOutOfRangeError: If the grand total exceeds MAX_GRAND_TOTAL
        ValueError: If price_per_day is not a positive number
    """
    try:
        rate = Decimal(str(price_per_day))
    except InvalidOperation:
        raise ValueError(f'Invalid daily rate: {price_per_day!r}') from None
    if not rate.is_finite() or rate <= 0:
        raise ValueError(f'Daily rate must be positive, got {price_per_day!r}')

    start = parse_date(start_date, 'start_date')
    end = parse_date(end_date, 'end_date')
    if end < start:
        raise InvalidRangeError(
            f'End date {end.isoformat()} is before start date {start.isoformat()}.'
        )

    days = (end - start).days + 1
    subtotal = _money(rate * days)
    service_fee = _money(subtotal * SERVICE_FEE_RATE)
    grand_total = subtotal + service_fee + INSURANCE_FEE
    if grand_total > MAX_GRAND_TOTAL:
        raise AmountOutOfRangeError(
            f'A {days}-day rental totals {grand_total}, above the maximum of '
            f'{MAX_GRAND_TOTAL}. Choose a shorter range.'
        )

    return Quote(
        days=days,
        subtotal=subtotal,
        service_fee=service_fee,
        insurance=INSURANCE_FEE,
        grand_total=grand_total,
    )
