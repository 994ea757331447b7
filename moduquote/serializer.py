"""Quotation (de)serialization.

This module converts quotations to and from the JSON shape used by
the storage slot and the HTTP API. Keys are camelCase and numbers
are written as decimal strings.
"""

import json
from typing import Any

from .models import Customer, Dimensions, LineItem, Quotation, Status, Unit


class QuotationSerializer:
    """Converts quotations to and from plain dictionaries and JSON.

    Stored derived values (amount, subtotal, taxAmount, total) are
    ignored on read; the models derive them again.
    """

    def from_dict(self, data: dict[str, Any]) -> Quotation:
        """Build a Quotation from its dictionary representation.

        Args:
            data: Dictionary with keys id, number, date, validUntil,
                customer, items, taxRate, discount, notes, status.

        Returns:
            A Quotation with freshly derived totals.

        Raises:
            ValueError: If required fields are missing or invalid.
        """
        if not isinstance(data, dict):
            raise ValueError("quotation must be an object")
        if not data.get('id'):
            raise ValueError("id is required")

        return Quotation(
            id=str(data['id']),
            number=str(data.get('number') or ''),
            date=str(data.get('date') or ''),
            valid_until=str(data.get('validUntil') or ''),
            customer=self._extract_customer(data.get('customer') or {}),
            items=self._extract_items(data.get('items') or []),
            tax_rate=data.get('taxRate', 0),
            discount=data.get('discount', 0),
            notes=str(data.get('notes') or ''),
            status=self._parse_enum(Status, data.get('status', Status.DRAFT))
        )

    def from_json(self, json_str: str) -> Quotation:
        """Build a Quotation from a JSON string.

        Raises:
            ValueError: If JSON is invalid or data is missing.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}") from e

        return self.from_dict(data)

    def list_from_json(self, json_str: str) -> list[Quotation]:
        """Build a list of quotations from a JSON array.

        Raises:
            ValueError: If the JSON is invalid, is not an array, or any
                quotation in it is invalid.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise ValueError("Stored quotations must be a JSON array")
        return [self.from_dict(entry) for entry in data]

    def to_dict(self, quotation: Quotation) -> dict[str, Any]:
        """Convert a quotation to dictionary format."""
        return {
            'id': quotation.id,
            'number': quotation.number,
            'date': quotation.date,
            'validUntil': quotation.valid_until,
            'customer': {
                'name': quotation.customer.name,
                'email': quotation.customer.email,
                'phone': quotation.customer.phone,
                'address': quotation.customer.address
            },
            'items': [self.item_to_dict(item) for item in quotation.items],
            'subtotal': str(quotation.subtotal),
            'taxRate': str(quotation.tax_rate),
            'taxAmount': str(quotation.tax_amount),
            'discount': str(quotation.discount),
            'total': str(quotation.total),
            'notes': quotation.notes,
            'status': quotation.status.value
        }

    def item_to_dict(self, item: LineItem) -> dict[str, Any]:
        data = {
            'id': item.id,
            'category': item.category,
            'name': item.name,
            'description': item.description,
            'quantity': str(item.quantity),
            'unit': item.unit.value,
            'rate': str(item.rate),
            'amount': str(item.amount)
        }
        if item.dimensions is not None:
            data['dimensions'] = {
                'length': str(item.dimensions.length),
                'height': str(item.dimensions.height),
                'depth': str(item.dimensions.depth)
            }
        return data

    def to_json(self, quotation: Quotation) -> str:
        return json.dumps(self.to_dict(quotation), ensure_ascii=False)

    def list_to_json(self, quotations: list[Quotation]) -> str:
        return json.dumps(
            [self.to_dict(q) for q in quotations],
            ensure_ascii=False,
            indent=2
        )

    def _extract_customer(self, data: dict) -> Customer:
        if not isinstance(data, dict):
            raise ValueError("customer must be an object")
        return Customer(
            name=str(data.get('name') or ''),
            email=str(data.get('email') or ''),
            phone=str(data.get('phone') or ''),
            address=str(data.get('address') or '')
        )

    def _extract_items(self, items_data: list[dict]) -> list[LineItem]:
        """Extract line items from a list of dictionaries.

        Args:
            items_data: List of dictionaries with line item data.

        Returns:
            List of LineItem objects.

        Raises:
            ValueError: If an item has no id or an unknown unit.
        """
        if not isinstance(items_data, list):
            raise ValueError("items must be an array")

        line_items = []
        for item in items_data:
            if not isinstance(item, dict) or not item.get('id'):
                raise ValueError("line item id is required")

            dimensions = None
            if item.get('dimensions'):
                dims = item['dimensions']
                if not isinstance(dims, dict):
                    raise ValueError("dimensions must be an object")
                dimensions = Dimensions(
                    length=dims.get('length', 0),
                    height=dims.get('height', 0),
                    depth=dims.get('depth', 0)
                )

            line_items.append(LineItem(
                id=str(item['id']),
                category=str(item.get('category', 'General')),
                name=str(item.get('name') or ''),
                description=str(item.get('description') or ''),
                quantity=item.get('quantity', 1),
                unit=self._parse_enum(Unit, item.get('unit', Unit.NOS)),
                rate=item.get('rate', 0),
                dimensions=dimensions
            ))

        return line_items

    @staticmethod
    def _parse_enum(enum_cls, value):
        try:
            return enum_cls(value)
        except ValueError as e:
            raise ValueError(
                f"Invalid {enum_cls.__name__.lower()}: {value}"
            ) from e
