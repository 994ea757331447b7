"""Tests for quotation editing operations."""

from datetime import date
from decimal import Decimal

import pytest

from moduquote.editor import (
    DEFAULT_NOTES,
    SetCategory,
    SetDescription,
    SetDimensions,
    SetName,
    SetQuantity,
    SetRate,
    SetUnit,
    add_item,
    apply_update,
    field_update,
    new_item,
    new_quotation,
    remove_item,
    set_discount,
    set_tax_rate,
    update_customer,
    update_details,
    update_item,
)
from moduquote.models import Dimensions, LineItem, Quotation, Status, Unit


@pytest.fixture
def quotation():
    """A quotation with two priced items, discount 200 and 10% tax."""
    return Quotation(
        id='q-1',
        items=[
            LineItem('a', category='Kitchen', name='Base unit', quantity=2, rate=500),
            LineItem('b', category='Wardrobe', name='Shutter', quantity=1, rate=1500),
        ],
        tax_rate=10,
        discount=200
    )


class TestNewQuotation:
    """Tests for new_quotation."""

    def test_defaults(self):
        """Test a new quotation is an empty draft."""
        quotation = new_quotation(today=date(2026, 10, 19))

        assert quotation.id
        assert quotation.number.startswith('MQ-2026-')
        assert quotation.date == '2026-10-19'
        assert quotation.valid_until == '2026-11-18'
        assert quotation.items == ()
        assert quotation.tax_rate == Decimal('10')
        assert quotation.discount == Decimal('0')
        assert quotation.notes == DEFAULT_NOTES
        assert quotation.status is Status.DRAFT
        assert quotation.subtotal == Decimal('0')
        assert quotation.tax_amount == Decimal('0')
        assert quotation.total == Decimal('0')

    def test_overrides(self):
        quotation = new_quotation(
            today=date(2026, 1, 1),
            tax_rate='18',
            validity_days=15,
            quotation_id='fixed',
            number='MQ-TEST'
        )

        assert quotation.id == 'fixed'
        assert quotation.number == 'MQ-TEST'
        assert quotation.valid_until == '2026-01-16'
        assert quotation.tax_rate == Decimal('18')

    def test_unique_ids(self):
        assert new_quotation().id != new_quotation().id


class TestAddItem:
    """Tests for add_item."""

    def test_appends_default_item(self, quotation):
        result = add_item(quotation)

        assert len(result.items) == 3
        added = result.items[-1]
        assert added.id not in ('a', 'b')
        assert added.category == 'General'
        assert added.quantity == Decimal('1')
        assert added.rate == Decimal('0')
        assert added.amount == Decimal('0')
        assert result.subtotal == Decimal('2500')

    def test_appends_given_item(self, quotation):
        result = add_item(quotation, LineItem('c', quantity=4, rate=250))

        assert [item.id for item in result.items] == ['a', 'b', 'c']
        assert result.subtotal == Decimal('3500')
        assert result.total == Decimal('3500') - 200 + Decimal('330')

    def test_original_unchanged(self, quotation):
        add_item(quotation)

        assert len(quotation.items) == 2

    def test_new_item_ids_are_unique(self):
        assert new_item().id != new_item().id


class TestUpdateItem:
    """Tests for update_item and apply_update."""

    def test_quantity_updates_amount_and_totals(self, quotation):
        """Test changing quantity recomputes amount before totals."""
        result = update_item(quotation, 'a', SetQuantity(3))

        assert result.items[0].amount == Decimal('1500')
        assert result.subtotal == Decimal('3000')
        assert result.tax_amount == Decimal('280')
        assert result.total == Decimal('3080')

    def test_rate_updates_amount_and_totals(self, quotation):
        result = update_item(quotation, 'b', SetRate('2000'))

        assert result.items[1].amount == Decimal('2000')
        assert result.subtotal == Decimal('3000')

    def test_malformed_quantity_is_zero(self, quotation):
        result = update_item(quotation, 'a', SetQuantity('lots'))

        assert result.items[0].quantity == Decimal('0')
        assert result.items[0].amount == Decimal('0')
        assert result.subtotal == Decimal('1500')

    def test_text_fields(self, quotation):
        result = update_item(quotation, 'a', SetName('Tall unit'))
        result = update_item(result, 'a', SetCategory('Pantry'))
        result = update_item(result, 'a', SetDescription('BWR ply'))

        item = result.items[0]
        assert (item.name, item.category, item.description) == (
            'Tall unit', 'Pantry', 'BWR ply'
        )
        assert item.amount == Decimal('1000')

    def test_unit_and_dimensions(self, quotation):
        dims = Dimensions(length=2400, height=720, depth=560)
        result = update_item(quotation, 'a', SetUnit(Unit.RFT))
        result = update_item(result, 'a', SetDimensions(dims))

        assert result.items[0].unit is Unit.RFT
        assert result.items[0].dimensions == dims

    def test_unknown_id_is_noop(self, quotation):
        """Test updating a missing item changes nothing."""
        result = update_item(quotation, 'missing', SetQuantity(10))

        assert result == quotation

    def test_other_items_untouched(self, quotation):
        result = update_item(quotation, 'a', SetRate(1))

        assert result.items[1] is quotation.items[1]

    def test_apply_unknown_update(self):
        with pytest.raises(TypeError):
            apply_update(LineItem('a'), 'quantity')


class TestFieldUpdate:
    """Tests for field_update."""

    @pytest.mark.parametrize('field, value, expected', [
        ('category', 'Kitchen', SetCategory('Kitchen')),
        ('name', 'Loft', SetName('Loft')),
        ('description', None, SetDescription('')),
        ('quantity', '2', SetQuantity(Decimal('2'))),
        ('rate', 'abc', SetRate(Decimal('0'))),
        ('unit', 'Mtr', SetUnit(Unit.MTR)),
        ('dimensions', None, SetDimensions(None)),
    ])
    def test_known_fields(self, field, value, expected):
        assert field_update(field, value) == expected

    def test_dimensions(self):
        update = field_update('dimensions', {'length': '900', 'height': 600})

        assert update == SetDimensions(Dimensions(length=900, height=600))

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            field_update('amount', 100)

    def test_invalid_unit(self):
        with pytest.raises(ValueError):
            field_update('unit', 'Bag')


class TestRemoveItem:
    """Tests for remove_item."""

    def test_remove_item(self, quotation):
        result = remove_item(quotation, 'a')

        assert [item.id for item in result.items] == ['b']
        assert result.subtotal == Decimal('1500')
        assert result.tax_amount == Decimal('130')
        assert result.total == Decimal('1430')

    def test_remove_last_item(self, quotation):
        """Test removing every item leaves only discount and tax."""
        result = remove_item(remove_item(quotation, 'a'), 'b')

        assert result.items == ()
        assert result.subtotal == Decimal('0')
        assert result.tax_amount == Decimal('-20')
        assert result.total == Decimal('-220')

    def test_unknown_id_is_noop(self, quotation):
        assert remove_item(quotation, 'missing') == quotation


class TestDiscountAndTax:
    """Tests for set_discount and set_tax_rate."""

    def test_set_discount(self, quotation):
        result = set_discount(quotation, '500')

        assert result.discount == Decimal('500')
        assert result.tax_amount == Decimal('200')
        assert result.total == Decimal('2200')

    def test_discount_exceeds_subtotal(self):
        quotation = Quotation(
            id='q-2', items=[LineItem('a', quantity=1, rate=500)], tax_rate=10
        )

        result = set_discount(quotation, 1000)

        assert result.tax_amount == Decimal('-50')
        assert result.total == Decimal('-550')

    def test_set_tax_rate(self, quotation):
        result = set_tax_rate(quotation, 18)

        assert result.tax_amount == Decimal('414')
        assert result.total == Decimal('2714')

    def test_non_numeric_tax_rate(self, quotation):
        result = set_tax_rate(quotation, 'eighteen')

        assert result.tax_rate == Decimal('0')
        assert result.tax_amount == Decimal('0')
        assert result.total == Decimal('2300')


class TestCustomerAndDetails:
    """Tests for update_customer and update_details."""

    def test_update_customer(self, quotation):
        result = update_customer(quotation, name='Asha Rao', phone='98450 00000')

        assert result.customer.name == 'Asha Rao'
        assert result.customer.phone == '98450 00000'
        assert result.customer.email == ''
        assert result.total == quotation.total

    def test_unknown_customer_field(self, quotation):
        with pytest.raises(ValueError):
            update_customer(quotation, gstin='29ABCDE')

    def test_update_details(self, quotation):
        result = update_details(
            quotation, status='Approved', notes='Paid in full', number='MQ-1'
        )

        assert result.status is Status.APPROVED
        assert result.notes == 'Paid in full'
        assert result.number == 'MQ-1'
        assert result.total == quotation.total

    def test_invalid_status(self, quotation):
        with pytest.raises(ValueError):
            update_details(quotation, status='Archived')

    def test_totals_not_editable(self, quotation):
        with pytest.raises(ValueError):
            update_details(quotation, total=0)
