"""Pricing and recalculation engine.

This module holds the only business arithmetic of a quotation:
line amounts, subtotal, tax on the discounted base, and the final
total. Every function here is pure and never raises.
"""

import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation, getcontext, localcontext
from typing import Any, Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Quotation

ZERO = Decimal('0')
HUNDRED = Decimal('100')

# Largest accepted magnitude is below 10 ** (MAX_EXPONENT + 1)
MAX_EXPONENT = 15


def to_amount(value: Any) -> Decimal:
    """Coerce a raw numeric input into a finite Decimal.

    Accepts Decimals, ints, floats and strings such as "1,500" or
    "₹ 2500.50". Anything that does not parse to a finite number
    (empty strings, "abc", "2 x 3", None, NaN, infinities) becomes 0,
    as do values too large to be a price or quantity.

    Args:
        value: The raw value, typically from a form field or JSON body.

    Returns:
        A finite Decimal.
    """
    amount = _coerce(value)
    if amount and amount.adjusted() > MAX_EXPONENT:
        return ZERO
    return amount


def _coerce(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        amount = _parse(str(value))
    elif isinstance(value, str):
        # Remove currency symbols, grouping commas, and whitespace
        amount = _parse(re.sub(r'[₹$,\s]', '', value))
    else:
        amount = None

    if amount is None or not amount.is_finite():
        return ZERO
    return amount


def _parse(text: str):
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def _untrapped():
    """Decimal context where overflow and invalid results yield
    Infinity or NaN instead of raising."""
    context = getcontext().copy()
    context.clear_traps()
    return localcontext(context)


def line_amount(quantity: Any, rate: Any) -> Decimal:
    """Amount of a single line item: quantity times rate."""
    with _untrapped():
        amount = to_amount(quantity) * to_amount(rate)
    return amount if amount.is_finite() else ZERO


@dataclass(frozen=True)
class Totals:
    """Derived money fields of a quotation.

    Attributes:
        subtotal: Sum of all line item amounts
        tax_amount: Tax on (subtotal - discount)
        total: subtotal - discount + tax_amount
    """
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total: Decimal = ZERO


def compute_totals(
    amounts: Iterable[Any],
    discount: Any = ZERO,
    tax_rate: Any = ZERO
) -> Totals:
    """Compute subtotal, tax and total from line amounts.

    The discount is applied before tax. A discount larger than the
    subtotal yields a negative taxable base, so tax and total can
    both be negative; no clamping is done.

    Args:
        amounts: Line item amounts, already equal to quantity * rate.
        discount: Flat discount. Non-numeric values count as 0.
        tax_rate: Tax percentage. Non-numeric values count as 0.

    Returns:
        The derived Totals.
    """
    discount = to_amount(discount)
    tax_rate = to_amount(tax_rate)

    with _untrapped():
        subtotal = sum((_coerce(a) for a in amounts), ZERO)
        tax_amount = (subtotal - discount) * (tax_rate / HUNDRED)
        total = subtotal - discount + tax_amount

    if not (subtotal.is_finite() and total.is_finite()):
        return Totals()

    return Totals(subtotal=subtotal, tax_amount=tax_amount, total=total)


def recalculate(quotation: 'Quotation') -> 'Quotation':
    """Return a copy of a quotation with its totals recomputed.

    Subtotal, tax amount and total are derived from the current items,
    discount and tax rate. Every other field is carried over unchanged.
    Item amounts are trusted as they are.

    Args:
        quotation: The quotation snapshot to price.

    Returns:
        A new Quotation snapshot.
    """
    # Derived fields are init=False, so the copy re-runs the pricing
    # in Quotation.__post_init__.
    return replace(quotation)
