"""Editing operations on quotations.

Every operation takes a quotation snapshot and returns the next one,
priced by the recalculation engine. Nothing is mutated in place.
Line item changes are expressed as small update objects rather than
field names.
"""

import random
import uuid
from dataclasses import dataclass, fields, replace
from datetime import date, timedelta
from typing import Any, Optional, Union

from .models import Customer, Dimensions, LineItem, Quotation, Status, Unit
from .pricing import recalculate, to_amount

DEFAULT_TAX_RATE = 10
DEFAULT_VALIDITY_DAYS = 30
DEFAULT_NOTES = (
    "1. 50% Advance payment required.\n"
    "2. Delivery within 4-6 weeks.\n"
    "3. Goods once sold cannot be returned."
)


@dataclass(frozen=True)
class SetCategory:
    category: str


@dataclass(frozen=True)
class SetName:
    name: str


@dataclass(frozen=True)
class SetDescription:
    description: str


@dataclass(frozen=True)
class SetDimensions:
    dimensions: Optional[Dimensions]


@dataclass(frozen=True)
class SetQuantity:
    quantity: Any


@dataclass(frozen=True)
class SetUnit:
    unit: Unit


@dataclass(frozen=True)
class SetRate:
    rate: Any


ItemUpdate = Union[
    SetCategory, SetName, SetDescription, SetDimensions,
    SetQuantity, SetUnit, SetRate
]


def apply_update(item: LineItem, update: ItemUpdate) -> LineItem:
    """Apply one update to a line item.

    Quantity and rate changes produce an item whose amount is already
    quantity * rate, since LineItem derives it on construction.

    Args:
        item: The line item to change.
        update: One of the Set* update objects.

    Returns:
        The updated LineItem.

    Raises:
        TypeError: If update is not a known update object.
    """
    if isinstance(update, SetCategory):
        return replace(item, category=update.category)
    if isinstance(update, SetName):
        return replace(item, name=update.name)
    if isinstance(update, SetDescription):
        return replace(item, description=update.description)
    if isinstance(update, SetDimensions):
        return replace(item, dimensions=update.dimensions)
    if isinstance(update, SetQuantity):
        return replace(item, quantity=to_amount(update.quantity))
    if isinstance(update, SetUnit):
        return replace(item, unit=Unit(update.unit))
    if isinstance(update, SetRate):
        return replace(item, rate=to_amount(update.rate))
    raise TypeError(f"Unsupported item update: {update!r}")


def field_update(field_name: str, value: Any) -> ItemUpdate:
    """Build an update object from a form field name and raw value.

    Args:
        field_name: One of category, name, description, dimensions,
            quantity, unit, rate.
        value: The raw submitted value.

    Returns:
        The matching update object.

    Raises:
        ValueError: If the field is unknown or the unit is invalid.
    """
    if field_name == 'category':
        return SetCategory(str(value or ''))
    if field_name == 'name':
        return SetName(str(value or ''))
    if field_name == 'description':
        return SetDescription(str(value or ''))
    if field_name == 'quantity':
        return SetQuantity(to_amount(value))
    if field_name == 'rate':
        return SetRate(to_amount(value))
    if field_name == 'unit':
        return SetUnit(Unit(value))
    if field_name == 'dimensions':
        if not value:
            return SetDimensions(None)
        if not isinstance(value, dict):
            raise ValueError("dimensions must be an object")
        return SetDimensions(Dimensions(
            length=value.get('length', 0),
            height=value.get('height', 0),
            depth=value.get('depth', 0)
        ))
    raise ValueError(f"Unknown line item field: {field_name}")


def new_item(item_id: Optional[str] = None) -> LineItem:
    """Create a line item with default values and a fresh id."""
    return LineItem(id=item_id or uuid.uuid4().hex)


def add_item(quotation: Quotation, item: Optional[LineItem] = None) -> Quotation:
    """Append a line item (a blank one by default) to the quotation."""
    item = item or new_item()
    return _next(quotation, items=quotation.items + (item,))


def update_item(
    quotation: Quotation,
    item_id: str,
    update: ItemUpdate
) -> Quotation:
    """Apply an update to the item with the given id.

    An unknown id leaves the items unchanged.
    """
    items = tuple(
        apply_update(item, update) if item.id == item_id else item
        for item in quotation.items
    )
    return _next(quotation, items=items)


def remove_item(quotation: Quotation, item_id: str) -> Quotation:
    """Remove the item with the given id. An unknown id is a no-op."""
    items = tuple(item for item in quotation.items if item.id != item_id)
    return _next(quotation, items=items)


def set_discount(quotation: Quotation, discount: Any) -> Quotation:
    return _next(quotation, discount=to_amount(discount))


def set_tax_rate(quotation: Quotation, tax_rate: Any) -> Quotation:
    return _next(quotation, tax_rate=to_amount(tax_rate))


CUSTOMER_FIELDS = frozenset(f.name for f in fields(Customer))
DETAIL_FIELDS = frozenset(('number', 'date', 'valid_until', 'notes', 'status'))


def update_customer(quotation: Quotation, **changes: Any) -> Quotation:
    """Change one or more customer fields (name, email, phone, address).

    Raises:
        ValueError: If a field name is not a customer field.
    """
    unknown = set(changes) - CUSTOMER_FIELDS
    if unknown:
        raise ValueError(f"Unknown customer field: {', '.join(sorted(unknown))}")
    customer = replace(
        quotation.customer,
        **{key: str(value or '') for key, value in changes.items()}
    )
    return _next(quotation, customer=customer)


def update_details(quotation: Quotation, **changes: Any) -> Quotation:
    """Change the number, dates, notes or status of a quotation.

    Raises:
        ValueError: If a field name is not editable here, or the
            status is not a valid Status.
    """
    unknown = set(changes) - DETAIL_FIELDS
    if unknown:
        raise ValueError(f"Unknown quotation field: {', '.join(sorted(unknown))}")
    if 'status' in changes:
        changes['status'] = Status(changes['status'])
    for key in ('number', 'date', 'valid_until', 'notes'):
        if key in changes:
            changes[key] = str(changes[key] or '')
    return _next(quotation, **changes)


def new_quotation(
    today: Optional[date] = None,
    tax_rate: Any = DEFAULT_TAX_RATE,
    validity_days: int = DEFAULT_VALIDITY_DAYS,
    quotation_id: Optional[str] = None,
    number: Optional[str] = None
) -> Quotation:
    """Create an empty draft quotation.

    Args:
        today: Issue date. Defaults to the current date.
        tax_rate: Initial tax percentage.
        validity_days: Days from issue until the offer expires.
        quotation_id: Identifier to use instead of a generated one.
        number: Human readable number instead of "MQ-<year>-<n>".

    Returns:
        A Draft Quotation with no items and zero totals.
    """
    today = today or date.today()
    if number is None:
        number = f"MQ-{today.year}-{random.randint(0, 9999)}"

    return recalculate(Quotation(
        id=quotation_id or uuid.uuid4().hex,
        number=number,
        date=today.isoformat(),
        valid_until=(today + timedelta(days=validity_days)).isoformat(),
        customer=Customer(),
        items=(),
        tax_rate=to_amount(tax_rate),
        discount=0,
        notes=DEFAULT_NOTES,
        status=Status.DRAFT
    ))


def _next(quotation: Quotation, **changes: Any) -> Quotation:
    return recalculate(replace(quotation, **changes))
