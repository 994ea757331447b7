"""Print-ready rendering of quotations.

This module turns a stored quotation into a document: a structured
summary for export and a plain-text print layout. Numbers are taken
from the quotation as stored and are never derived again here.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from .models import LineItem, Quotation

CURRENCY_SYMBOL = '₹'

COMPANY_HEADER = (
    'ModuQuote',
    'Premium Modular Interiors',
    '123 Design Avenue, Creative City',
    'contact@moduquote.com',
    'GSTIN: 29ABCDE1234F1Z5',
)


def format_inr(value: Decimal) -> str:
    """Format an amount as Indian rupees, e.g. 2530000 -> '₹25,30,000.00'.

    Uses Indian digit grouping (last three digits, then pairs). At least
    two decimals are shown; further digits are kept as they are, so no
    rounding happens.
    """
    value = Decimal(value)
    sign = '-' if value < 0 else ''
    value = abs(value)
    whole, _, fraction = f"{value:f}".partition('.')
    fraction = fraction.ljust(2, '0')
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        whole = ','.join(pairs + [tail])

    return f"{sign}{CURRENCY_SYMBOL}{whole}.{fraction}"


@dataclass
class QuoteDocument:
    """Everything a printed quotation or invoice shows.

    Attributes:
        title: "QUOTATION" or "TAX INVOICE"
        number: Quotation number
        status: Current status
        is_invoice: Whether the document is an invoice
        date_label: "Date:" or "Invoice Date:"
        date: Issue date
        valid_until: Expiry date, None for invoices
        customer: Customer fields
        groups: Items grouped by category, in first-appearance order
        subtotal: Stored subtotal
        discount: Stored discount
        tax_rate: Stored tax percentage
        tax_amount: Stored tax amount
        total: Stored total
        notes: Notes and terms
        file_name: Suggested export file name
    """
    title: str
    number: str
    status: str
    is_invoice: bool
    date_label: str
    date: str
    valid_until: Optional[str]
    customer: dict = field(default_factory=dict)
    groups: list[dict] = field(default_factory=list)
    subtotal: Decimal = Decimal('0')
    discount: Decimal = Decimal('0')
    tax_rate: Decimal = Decimal('0')
    tax_amount: Decimal = Decimal('0')
    total: Decimal = Decimal('0')
    notes: str = ''
    file_name: str = ''

    def to_dict(self) -> dict:
        """Convert the document to dictionary format.

        Returns:
            Dictionary representation with amounts as exact strings.
        """
        return {
            'title': self.title,
            'number': self.number,
            'status': self.status,
            'is_invoice': self.is_invoice,
            'date_label': self.date_label,
            'date': self.date,
            'valid_until': self.valid_until,
            'customer': self.customer,
            'groups': self.groups,
            'subtotal': str(self.subtotal),
            'discount': str(self.discount),
            'tax_rate': str(self.tax_rate),
            'tax_amount': str(self.tax_amount),
            'total': str(self.total),
            'notes': self.notes,
            'file_name': self.file_name
        }


class QuoteRenderer:
    """Renders quotations as print-ready documents."""

    def render(self, quotation: Quotation) -> QuoteDocument:
        """Build the document for a quotation.

        Args:
            quotation: The stored quotation.

        Returns:
            A QuoteDocument carrying the stored values verbatim.
        """
        is_invoice = quotation.is_invoice

        return QuoteDocument(
            title=quotation.status.document_title,
            number=quotation.number,
            status=quotation.status.value,
            is_invoice=is_invoice,
            date_label='Invoice Date:' if is_invoice else 'Date:',
            date=quotation.date,
            valid_until=None if is_invoice else quotation.valid_until,
            customer={
                'name': quotation.customer.name,
                'email': quotation.customer.email,
                'phone': quotation.customer.phone,
                'address': quotation.customer.address
            },
            groups=self._group_items(quotation.items),
            subtotal=quotation.subtotal,
            discount=quotation.discount,
            tax_rate=quotation.tax_rate,
            tax_amount=quotation.tax_amount,
            total=quotation.total,
            notes=quotation.notes,
            file_name=self.file_name(quotation)
        )

    @staticmethod
    def file_name(quotation: Quotation) -> str:
        return f"Quote_{quotation.number or 'Draft'}.pdf"

    def _group_items(self, items: tuple[LineItem, ...]) -> list[dict]:
        """Group line items by category.

        Categories keep the order in which they first appear, and items
        are numbered from 1 within each category.
        """
        groups: dict[str, list[dict]] = {}
        for item in items:
            rows = groups.setdefault(item.category, [])
            row = {
                'index': len(rows) + 1,
                'id': item.id,
                'name': item.name,
                'description': item.description,
                'quantity': str(item.quantity),
                'unit': item.unit.value,
                'rate': str(item.rate),
                'amount': str(item.amount),
                'dimensions': None
            }
            if item.dimensions is not None and item.dimensions.is_set:
                row['dimensions'] = (
                    f"{item.dimensions.length} x {item.dimensions.height} "
                    f"x {item.dimensions.depth}"
                )
            rows.append(row)

        return [
            {'category': category, 'items': rows}
            for category, rows in groups.items()
        ]

    def get_formatted_document(self, quotation: Quotation) -> str:
        """Generate the plain-text print layout of a quotation.

        Args:
            quotation: The stored quotation.

        Returns:
            Formatted string ready for printing.
        """
        doc = self.render(quotation)

        lines = [doc.title, f"#{doc.number}"]
        if doc.is_invoice:
            lines.append(f"[{doc.status.upper()}]")
        lines.append("")
        lines.extend(COMPANY_HEADER)
        lines.append("=" * 60)

        lines.append("BILL TO")
        for key in ('name', 'address', 'email', 'phone'):
            if doc.customer[key]:
                lines.append(f"  {doc.customer[key]}")
        lines.append("")
        lines.append(f"{doc.date_label} {doc.date}")
        if doc.valid_until is not None:
            lines.append(f"Valid Until: {doc.valid_until}")
        lines.append("")

        lines.append("Items:")
        lines.append("-" * 60)
        for group in doc.groups:
            lines.append(group['category'].upper())
            for row in group['items']:
                lines.append(
                    f"  {row['index']}. {row['name']}: "
                    f"{row['quantity']} {row['unit']} x "
                    f"{format_inr(Decimal(row['rate']))} = "
                    f"{format_inr(Decimal(row['amount']))}"
                )
                if row['description']:
                    lines.append(f"     {row['description']}")
                if row['dimensions']:
                    lines.append(f"     Dims: {row['dimensions']}")
        lines.append("-" * 60)

        lines.append(f"Subtotal: {format_inr(doc.subtotal)}")
        if doc.discount > 0:
            lines.append(f"Discount: -{format_inr(doc.discount)}")
        lines.append(f"GST ({doc.tax_rate}%): {format_inr(doc.tax_amount)}")
        lines.append(f"Total: {format_inr(doc.total)}")

        if doc.notes:
            lines.append("")
            lines.append("Notes & Terms")
            lines.append(doc.notes)

        return "\n".join(lines)
