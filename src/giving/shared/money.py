"""Money helpers for the ledger.

All ledger amounts are integer minor units (cents). Floating point never
touches a stored amount; conversions from decimal inputs go through
``decimal`` with half-up rounding.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.exceptions import ValidationError

CENT = Decimal("0.01")


def to_cents(value) -> int:
    """Convert a major-unit amount (e.g. ``"12.345"`` dollars) to cents."""
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError({"amount": [f"Invalid monetary amount: {value!r}"]}) from None
    if not amount.is_finite():
        raise ValidationError({"amount": [f"Invalid monetary amount: {value!r}"]})
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int, symbol: str = "$") -> str:
    """Render cents for humans, e.g. ``15000`` -> ``"$150.00"``."""
    sign = "-" if cents < 0 else ""
    dollars = (Decimal(abs(cents)) * CENT).quantize(CENT)
    return f"{sign}{symbol}{dollars:,.2f}"


def seller_contribution(subtotal_cents: int, donation_percentage) -> int:
    """A shop's pledge for an order: ``subtotal * percentage / 100``, in cents."""
    percentage = Decimal(str(donation_percentage))
    if percentage < 0 or percentage > 100:
        raise ValidationError({"donation_percentage": ["Donation percentage must be between 0 and 100"]})
    if subtotal_cents < 0:
        raise ValidationError({"subtotal": ["Subtotal cannot be negative"]})
    pledge = Decimal(subtotal_cents) * percentage / Decimal(100)
    return int(pledge.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
