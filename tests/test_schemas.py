import json
from datetime import date, timedelta

from needibay.models.schemas import (
    DistributorForm,
    LoginForm,
    OrderForm,
    OrderUpdateForm,
    PartialPaymentForm,
    ProductForm,
    QuantityUpdateForm,
    SalespersonForm,
    ShopForm,
    parse_quantity,
    validate_form,
)

DISTRIBUTOR = {
    'name': 'Acme Traders',
    'email': 'acme@example.com',
    'password': 'secret1',
    'phone_number': '9876543210',
    'gst_number': '',
    'pan': '',
    'address': '12 Market Road',
}


def test_login_requires_both_fields():
    form, errors = validate_form(LoginForm, {'email': 'a@b.com', 'password': ''})
    assert form is None
    assert errors == ['Both email and password are required.']


def test_distributor_payload_is_camel_case_without_blank_optionals():
    form, errors = validate_form(DistributorForm, DISTRIBUTOR)
    assert errors == []
    assert form.payload() == {
        'name': 'Acme Traders',
        'email': 'acme@example.com',
        'password': 'secret1',
        'phoneNumber': '9876543210',
        'address': '12 Market Road',
    }


def test_distributor_errors_are_all_reported():
    data = dict(DISTRIBUTOR, email='not-an-email', password='abc', pan='ABC')
    form, errors = validate_form(DistributorForm, data)
    assert form is None
    assert 'Invalid email format' in errors
    assert 'Password must be at least 6 characters long' in errors
    assert 'PAN must be exactly 10 characters long' in errors


def test_distributor_pan_of_ten_characters_is_sent():
    form, errors = validate_form(DistributorForm, dict(DISTRIBUTOR, pan='ABCDE1234F', gst_number='22AAAAA0000A1Z5'))
    assert errors == []
    assert form.payload()['pan'] == 'ABCDE1234F'
    assert form.payload()['gstNumber'] == '22AAAAA0000A1Z5'


def test_phone_number_length_and_digits():
    _, errors = validate_form(DistributorForm, dict(DISTRIBUTOR, phone_number='12345'))
    assert errors == ['Phone number must be at least 10 characters long']

    _, errors = validate_form(DistributorForm, dict(DISTRIBUTOR, phone_number='98765-43210'))
    assert errors == ['Phone number must only contain digits']

    _, errors = validate_form(SalespersonForm, {
        'email': 's@example.com', 'password': 'secret1', 'name': 'Sam',
        'phone_number': '1234567890123456', 'employee_id': 'E-1',
    })
    assert errors == ['Phone number must be at most 15 digits']


def test_product_required_fields():
    _, errors = validate_form(ProductForm, {'name': 'Rice', 'mrp': '10'})
    assert errors == ['Please fill in all required fields.']


def test_product_multipart_fields_are_strings_with_json_variants():
    form, errors = validate_form(ProductForm, {
        'name': 'Rice',
        'distributor_price': '40',
        'retailer_price': '45.5',
        'mrp': '50',
        'category_id': 3,
        'inventory_count': '100',
        'variants': [{'variant_name': 'Size', 'variant_value': '1kg', 'price': '42', 'stock_quantity': '10'}],
    })
    assert errors == []
    fields = form.multipart_fields()
    assert all(isinstance(v, str) for v in fields.values())
    assert fields['categoryId'] == '3'
    assert fields['inventoryCount'] == '100'
    assert json.loads(fields['variants']) == [
        {'variantName': 'Size', 'variantValue': '1kg', 'price': 42.0, 'stockQuantity': 10}
    ]


def test_product_negative_price_rejected():
    _, errors = validate_form(ProductForm, {
        'name': 'Rice', 'distributor_price': '-1', 'retailer_price': '1',
        'mrp': '1', 'category_id': '1', 'inventory_count': '1',
    })
    assert errors == ['Prices cannot be negative.']


def test_shop_requires_fields_and_defaults_slot():
    _, errors = validate_form(ShopForm, {'name': 'Corner Store'})
    assert errors == ['Please fill out all required fields.']

    form, errors = validate_form(ShopForm, {
        'name': 'Corner Store', 'owner_name': 'Ravi', 'contact_number': '9876543210',
        'email': 'shop@example.com', 'preferred_delivery_slot': '',
    })
    assert errors == []
    assert form.payload()['preferredDeliverySlot'] == '11:00 AM - 2:00 PM'


def test_order_form_reports_every_missing_field():
    _, errors = validate_form(OrderForm, {})
    assert errors == [
        'Please select a shopkeeper',
        'Please select a distributor',
        'Please select a delivery date',
        'Please select a delivery slot',
        'Please add at least one item to the order',
    ]


def test_order_form_rejects_past_delivery_date():
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    _, errors = validate_form(OrderForm, {
        'shopkeeper_id': '4', 'distributor_id': '2', 'delivery_date': yesterday,
        'delivery_slot': '9:00 AM - 11:00 AM',
        'items': [{'product_id': 1, 'quantity': 1}],
    })
    assert errors == ['Delivery date cannot be in the past']


def test_order_form_payload():
    today = date.today().isoformat()
    form, errors = validate_form(OrderForm, {
        'shopkeeper_id': '4', 'distributor_id': '2', 'salesperson_id': 7,
        'delivery_date': today, 'delivery_slot': '9:00 AM - 11:00 AM',
        'total_amount': 126.0, 'order_note': '',
        'items': [{'product_id': 1, 'product_name': 'Rice', 'variant_id': 5,
                   'variant_name': 'Size - 1kg', 'price': 42.0, 'quantity': 3}],
    })
    assert errors == []
    payload = form.payload()
    assert payload['shopkeeperId'] == 4
    assert payload['deliveryDate'] == today
    assert payload['paymentTerm'] == 'COD'
    assert 'orderNote' not in payload
    assert payload['items'][0] == {
        'productId': 1, 'quantity': 3, 'productName': 'Rice', 'price': 42.0,
        'variantId': 5, 'variantName': 'Size - 1kg',
    }


def test_order_update_status_is_uppercased():
    form, errors = validate_form(OrderUpdateForm, {
        'delivery_date': '2026-05-01', 'delivery_slot': '4PM-9PM', 'status': 'delivered',
    })
    assert errors == []
    assert form.payload() == {'deliveryDate': '2026-05-01T00:00:00.000Z', 'deliverySlot': '4PM-9PM', 'status': 'DELIVERED'}

    _, errors = validate_form(OrderUpdateForm, {
        'delivery_date': '2026-05-01', 'delivery_slot': '4PM-9PM', 'status': 'lost',
    })
    assert errors == ['Please select a valid status']


def test_parse_quantity():
    assert parse_quantity('3') == 3
    assert parse_quantity(' 12 boxes') == 12
    assert parse_quantity('abc') == 0
    assert parse_quantity('') == 0
    assert parse_quantity(None) == 0


def test_quantities_must_be_positive():
    _, errors = validate_form(QuantityUpdateForm, {'items': [
        {'product_id': 1, 'quantity': '2'},
        {'product_id': 2, 'quantity': 'x'},
    ]})
    assert errors == ['Please ensure all quantities are greater than 0']

    form, errors = validate_form(QuantityUpdateForm, {'items': [
        {'product_id': 1, 'variant_id': 9, 'quantity': '2'},
    ]})
    assert errors == []
    assert form.payload() == {'items': [{'productId': 1, 'variantId': 9, 'quantity': 2}]}


def test_partial_payment_requires_amounts():
    _, errors = validate_form(PartialPaymentForm, {'initial_amount': '50', 'remaining_amount': ''})
    assert errors == ['Please fill in all required fields']


def test_partial_payment_defaults_and_total():
    form, errors = validate_form(PartialPaymentForm, {
        'initial_amount': '60.10', 'remaining_amount': '39.90', 'payment_status': 'PARTIAL',
    })
    assert errors == []
    assert form.due_date == date.today()
    assert form.payment_status == 'partial'
    assert form.matches_total(100)
    assert not form.matches_total(100.5)
    assert form.payload()['initialAmount'] == 60.1
