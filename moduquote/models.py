"""Data models for quotations and invoices.

This module defines the data structures used to represent
customers, line items, and complete quotations. All snapshots are
immutable; derived money fields cannot be passed in and are always
produced by the pricing engine.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from .pricing import ZERO, compute_totals, line_amount, to_amount


class Unit(str, Enum):
    """Unit a line item is priced in."""
    NOS = 'Nos'
    SQFT = 'Sq.Ft'
    RFT = 'R.Ft'
    MTR = 'Mtr'
    SET = 'Set'


class Status(str, Enum):
    """Lifecycle status of a quotation."""
    DRAFT = 'Draft'
    SENT = 'Sent'
    APPROVED = 'Approved'
    PAID = 'Paid'

    @property
    def is_invoice(self) -> bool:
        """Approved and paid quotations are presented as invoices."""
        return self in (Status.APPROVED, Status.PAID)

    @property
    def document_title(self) -> str:
        return 'TAX INVOICE' if self.is_invoice else 'QUOTATION'


@dataclass(frozen=True)
class Dimensions:
    """Physical size of a furniture unit. Informational only.

    Negative sizes are stored as 0.

    Attributes:
        length: Length of the unit
        height: Height of the unit
        depth: Depth of the unit
    """
    length: Decimal = ZERO
    height: Decimal = ZERO
    depth: Decimal = ZERO

    def __post_init__(self):
        """Ensure all sizes are non-negative Decimals."""
        for name in ('length', 'height', 'depth'):
            size = to_amount(getattr(self, name))
            object.__setattr__(self, name, size if size > 0 else ZERO)

    @property
    def is_set(self) -> bool:
        return self.length > 0 or self.height > 0


@dataclass(frozen=True)
class Customer:
    """Who the quotation is addressed to. No validation is applied."""
    name: str = ''
    email: str = ''
    phone: str = ''
    address: str = ''


@dataclass(frozen=True)
class LineItem:
    """Represents a single priced entry in a quotation.

    Attributes:
        id: Unique, opaque identifier
        category: Grouping key (e.g., "Kitchen Base Units")
        name: Name of the furniture unit or service
        description: Free text specification
        quantity: Number of units
        unit: Unit the quantity is expressed in
        rate: Price per unit
        dimensions: Optional physical size
        amount: quantity * rate, computed on construction
    """
    id: str
    category: str = 'General'
    name: str = ''
    description: str = ''
    quantity: Decimal = Decimal('1')
    unit: Unit = Unit.NOS
    rate: Decimal = ZERO
    dimensions: Optional[Dimensions] = None
    amount: Decimal = field(init=False)

    def __post_init__(self):
        """Coerce numeric fields and derive the amount."""
        object.__setattr__(self, 'quantity', to_amount(self.quantity))
        object.__setattr__(self, 'rate', to_amount(self.rate))
        object.__setattr__(self, 'unit', Unit(self.unit))
        object.__setattr__(
            self, 'amount', line_amount(self.quantity, self.rate)
        )


@dataclass(frozen=True)
class Quotation:
    """Represents a complete quotation or invoice.

    Attributes:
        id: Unique identifier
        number: Human readable number (e.g., "MQ-2026-4821")
        date: Issue date
        valid_until: Date the offer expires
        customer: Who the quotation is for
        items: Ordered line items
        tax_rate: Tax percentage applied after discount
        discount: Flat amount subtracted before tax
        notes: Terms and other free text
        status: Draft, Sent, Approved or Paid
        subtotal: Sum of item amounts (derived)
        tax_amount: (subtotal - discount) * tax_rate / 100 (derived)
        total: subtotal - discount + tax_amount (derived)
    """
    id: str
    number: str = ''
    date: str = ''
    valid_until: str = ''
    customer: Customer = field(default_factory=Customer)
    items: tuple[LineItem, ...] = ()
    tax_rate: Decimal = ZERO
    discount: Decimal = ZERO
    notes: str = ''
    status: Status = Status.DRAFT
    subtotal: Decimal = field(init=False)
    tax_amount: Decimal = field(init=False)
    total: Decimal = field(init=False)

    def __post_init__(self):
        """Coerce inputs and derive the totals."""
        object.__setattr__(self, 'items', tuple(self.items))
        object.__setattr__(self, 'tax_rate', to_amount(self.tax_rate))
        object.__setattr__(self, 'discount', to_amount(self.discount))
        object.__setattr__(self, 'status', Status(self.status))

        totals = compute_totals(
            (item.amount for item in self.items),
            discount=self.discount,
            tax_rate=self.tax_rate
        )
        object.__setattr__(self, 'subtotal', totals.subtotal)
        object.__setattr__(self, 'tax_amount', totals.tax_amount)
        object.__setattr__(self, 'total', totals.total)

    def find_item(self, item_id: str) -> Optional[LineItem]:
        """Get a line item by id, or None if there is no such item."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def is_invoice(self) -> bool:
        return self.status.is_invoice
