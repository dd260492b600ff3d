from datetime import date

import pytest

from conftest import FakeApiClient, token_provider
from needibay.models.entities import Order, Product, Shop
from needibay.repositories import (
    AdminRepository,
    ApiError,
    AuthRepository,
    DistributorRepository,
    NetworkError,
    SalespersonRepository,
    SessionRepository,
)
from needibay.services import (
    AdminService,
    AuthService,
    CartService,
    DistributorService,
    SalespersonService,
)

PRODUCTS = [
    {'id': 1, 'name': 'Basmati Rice', 'distributorPrice': 40, 'retailerPrice': 45, 'mrp': 50,
     'inventoryCount': 10, 'variants': [{'id': 5, 'variantName': 'Size', 'variantValue': '5kg', 'price': 190}]},
    {'id': 2, 'name': 'Sunflower Oil', 'distributorPrice': 120, 'retailerPrice': 130, 'mrp': 140,
     'inventoryCount': 4},
]


@pytest.fixture
def api():
    return FakeApiClient()


@pytest.fixture
def admin(api):
    return AdminService(AdminRepository(api, token_provider))


@pytest.fixture
def distributor(api):
    return DistributorService(DistributorRepository(api, token_provider))


@pytest.fixture
def salesperson(api, request_ctx):
    return SalespersonService(SalespersonRepository(api, token_provider), CartService())


@pytest.fixture
def auth(api, request_ctx):
    return AuthService(AuthRepository(api), SessionRepository())


# ==============================================================================
# AUTH
# ==============================================================================

def test_login_keeps_token_and_user(auth, api):
    api.on('POST', '/auth/login', 200, {
        'token': 'jwt', 'user': {'id': 3, 'email': 'd@example.com', 'role': 'distributor'},
    })
    result = auth.login('d@example.com', 'secret')
    assert result['ok']
    assert result['dashboard'] == 'distributor_dashboard'
    assert auth.session_repo.get_token() == 'jwt'
    assert auth.current_user().role == 'DISTRIBUTOR'
    assert auth.is_authenticated()

    auth.logout()
    assert not auth.is_authenticated()


def test_login_unknown_role_keeps_nothing(auth, api):
    api.on('POST', '/auth/login', 200, {'token': 'jwt', 'user': {'id': 3, 'email': 'x@example.com', 'role': 'GUEST'}})
    result = auth.login('x@example.com', 'secret')
    assert result['error'] == 'Unknown role'
    assert auth.session_repo.get_token() is None


def test_login_error_messages(auth, api):
    api.on('POST', '/auth/login', raises=NetworkError('down'))
    assert auth.login('a@example.com', 'pw')['error'] == 'Please check your internet connection.'

    api.on('POST', '/auth/login', raises=ApiError('Unauthorized', status_code=401))
    assert auth.login('a@example.com', 'pw')['error'] == 'Please check your credentials.'

    assert auth.login('', 'pw')['error'] == 'Both email and password are required.'


# ==============================================================================
# ADMIN
# ==============================================================================

DISTRIBUTOR = {
    'name': 'Acme Traders', 'email': 'acme@example.com', 'password': 'secret1',
    'phone_number': '9876543210', 'address': '12 Market Road',
}


def test_create_distributor_succeeds_only_on_201(admin, api):
    api.on('POST', '/admin/create-distributor', 201, {'id': 1})
    result = admin.create_distributor(DISTRIBUTOR)
    assert result['message'] == 'Distributor created successfully!'
    assert api.last('POST')['json']['phoneNumber'] == '9876543210'
    assert api.last('POST')['token'] == 'tok'

    api.on('POST', '/admin/create-distributor', 200, {})
    assert admin.create_distributor(DISTRIBUTOR)['error'] == 'Something went wrong. Please try again.'

    api.on('POST', '/admin/create-distributor', raises=ApiError('Email taken', status_code=409))
    assert admin.create_distributor(DISTRIBUTOR)['error'] == 'Something went wrong. Please try again.'


def test_invalid_distributor_is_not_sent(admin, api):
    result = admin.create_distributor(dict(DISTRIBUTOR, password='123'))
    assert not result['ok']
    assert result['errors'] == ['Password must be at least 6 characters long']
    assert api.calls == []


def test_create_category_returns_new_category(admin, api):
    api.on('POST', '/admin/create-category', 201, {'id': 8, 'name': 'Grains'})
    result = admin.create_category('Grains')
    assert result['category'].id == 8
    assert admin.create_category('  ')['error'] == 'Please enter a category name.'


def test_create_product_sends_multipart(admin, api):
    result = admin.create_product({
        'name': 'Rice', 'distributor_price': '40', 'retailer_price': '45', 'mrp': '50',
        'category_id': '8', 'inventory_count': '10', 'variants': [],
    }, image=('rice.jpg', b'img', 'image/jpeg'))
    assert result['message'] == 'Product created successfully!'
    call = api.last('POST', '/admin/create-product')
    assert call['data']['variants'] == '[]'
    assert call['files'] == {'image': ('rice.jpg', b'img', 'image/jpeg')}


def test_search_products_and_shops():
    products = [Product.from_dict(p) for p in PRODUCTS]
    assert [p.id for p in AdminService.search_products(products, 'RICE')] == [1]
    assert len(AdminService.search_products(products, '')) == 2

    shops = [Shop.from_dict({'id': 1, 'name': 'Corner Store', 'ownerName': 'Ravi'}),
             Shop.from_dict({'id': 2, 'name': 'Main Street', 'ownerName': 'Priya'})]
    assert [s.id for s in AdminService.search_shops(shops, 'ravi')] == [1]
    assert [s.id for s in AdminService.search_shops(shops, 'street')] == [2]


def test_update_product_sends_only_changed_fields(admin, api):
    api.on('GET', '/admin/get-products', 200, PRODUCTS)
    result = admin.update_product(1, {
        'name': 'Basmati Rice', 'distributor_price': '40', 'retailer_price': '47',
        'mrp': '50.0', 'inventory_count': '10',
    })
    assert result['ok']
    assert api.last('PUT')['path'] == '/admin/product/1'
    assert api.last('PUT')['json'] == {'retailerPrice': 47.0}


def test_update_product_without_changes(admin, api):
    api.on('GET', '/admin/get-products', 200, PRODUCTS)
    result = admin.update_product(2, {'name': 'Sunflower Oil', 'mrp': '140'})
    assert result['error'] == 'No changes were made to the product.'
    assert result['no_changes']
    assert api.last('PUT') is None


def test_add_variant_wraps_single_variant(admin, api):
    result = admin.add_variant(1, {'variant_name': 'Size', 'variant_value': '10kg', 'price': '370', 'stock_quantity': '2'})
    assert result['message'] == 'Variant added successfully'
    call = api.last('POST')
    assert call['path'] == '/admin/products/1/variants'
    assert call['json'] == {'variants': [
        {'variantName': 'Size', 'variantValue': '10kg', 'price': 370.0, 'stockQuantity': 2},
    ]}


def test_delete_distributor_and_product(admin, api):
    assert admin.delete_distributor('abc')['message'] == 'Distributor deleted successfully'
    assert api.last('DELETE')['path'] == '/admin/distributor/abc'

    api.on('DELETE', '/admin/product/4', raises=ApiError('nope', status_code=500))
    assert admin.delete_product(4)['error'] == 'Failed to delete product. Please try again.'


def test_list_failures_return_empty_lists(admin, api):
    api.on('GET', '/admin/get-distributors', raises=NetworkError('down'))
    result = admin.list_distributors()
    assert result['distributors'] == []
    assert result['error'] == 'Failed to fetch distributors. Please try again.'


# ==============================================================================
# DISTRIBUTOR
# ==============================================================================

DISTRIBUTOR_ORDERS = {'responseOrders': [{
    'id': 31, 'status': 'PENDING', 'totalAmount': 100, 'deliverySlot': '11AM-2PM',
    'paymentTerm': 'PARTIAL',
    'shopkeeper': {'id': 4, 'name': 'Corner Store', 'contactNumber': '9876543210', 'balance': 20},
    'items': [{'productId': 1, 'variantId': 5, 'quantity': 2, 'price': 50, 'product': {'name': 'Rice'}}],
}]}


def test_distributor_orders_are_read_from_response_orders(distributor, api):
    api.on('GET', '/distributor/get-orders', 200, DISTRIBUTOR_ORDERS)
    orders = distributor.list_orders()['orders']
    assert len(orders) == 1
    assert orders[0].shop_name == 'Corner Store'
    assert orders[0].shop_balance == 20
    assert orders[0].items[0].product_name == 'Rice'
    assert orders[0].status_color == '#FFA500'


def test_update_order_payload(distributor, api):
    result = distributor.update_order(31, {'delivery_date': '2026-06-02', 'delivery_slot': '4PM-9PM', 'status': 'CANCELED'})
    assert result['message'] == 'Order updated successfully!'
    assert api.last('PUT')['json'] == {'deliveryDate': '2026-06-02T00:00:00.000Z', 'deliverySlot': '4PM-9PM', 'status': 'CANCELED'}


def test_confirm_update_summarises_without_sending(distributor, api):
    result = distributor.confirm_update({'delivery_date': '2026-06-02', 'delivery_slot': '4PM-9PM', 'status': 'delivered'})
    assert result['summary'] == {'delivery_date': '02/06/2026', 'delivery_slot': '4PM-9PM', 'status': 'DELIVERED'}
    assert api.calls == []


def test_update_quantities(distributor, api):
    result = distributor.update_quantities(31, [{'product_id': 1, 'variant_id': 5, 'quantity': '0'}])
    assert result['error'] == 'Please ensure all quantities are greater than 0'
    assert api.calls == []

    distributor.update_quantities(31, [{'product_id': 1, 'variant_id': 5, 'quantity': '4'}])
    assert api.last('PUT')['path'] == '/distributor/orders/31'
    assert api.last('PUT')['json'] == {'items': [{'productId': 1, 'variantId': 5, 'quantity': 4}]}


def test_partial_payment_must_match_total(distributor, api):
    order = Order.from_dict(DISTRIBUTOR_ORDERS['responseOrders'][0])
    result = distributor.update_partial_payment(order, {'initial_amount': '30', 'remaining_amount': '50'})
    assert not result['ok']
    assert api.calls == []

    result = distributor.update_partial_payment(order, {
        'initial_amount': '30', 'remaining_amount': '70', 'due_date': '2026-07-01', 'payment_status': 'partial',
    })
    assert result['ok']
    call = api.last('PUT')
    assert call['path'] == '/distributor/orders/31/partial-payment'
    assert call['json'] == {
        'initialAmount': 30.0, 'remainingAmount': 70.0, 'dueDate': '2026-07-01', 'paymentStatus': 'partial',
    }


# ==============================================================================
# SALESPERSON
# ==============================================================================

SHOP = {
    'name': 'Corner Store', 'owner_name': 'Ravi', 'contact_number': '9876543210',
    'email': 'shop@example.com', 'gps_location': '12.97, 77.59', 'preferred_delivery_slot': '4:00 PM - 9:00 PM',
}


def test_create_shop_includes_salesperson(salesperson, api):
    api.on('POST', '/salesperson/create-shop', 201, {'id': 4})
    result = salesperson.create_shop(SHOP, 7)
    assert result['message'] == 'Shopkeeper created successfully!'
    fields = api.last('POST')['data']
    assert fields['salespersonId'] == '7'
    assert fields['ownerName'] == 'Ravi'
    assert fields['preferredDeliverySlot'] == '4:00 PM - 9:00 PM'


def test_create_shop_shows_server_message(salesperson, api):
    api.on('POST', '/salesperson/create-shop', raises=ApiError('x', 409, {'message': 'Phone number already exists'}))
    assert salesperson.create_shop(SHOP, 7)['error'] == 'Phone number already exists'


def test_order_form_data(salesperson, api):
    api.on('GET', '/salesperson/get-products', 200, PRODUCTS)
    api.on('GET', '/salesperson/7/shops', 200, [{'id': 4, 'name': 'Corner Store'}])
    api.on('GET', '/salesperson/get-distributors', 200, [{'id': 2, 'name': 'Acme'}])
    data = salesperson.order_form_data(7)
    assert [p.name for p in data['products']] == ['Basmati Rice', 'Sunflower Oil']
    assert data['shops'][0].id == 4
    assert data['distributors'][0].name == 'Acme'


def _order_details():
    return {
        'shopkeeper_id': '4', 'distributor_id': '2', 'delivery_date': date.today().isoformat(),
        'delivery_slot': '9:00 AM - 11:00 AM', 'payment_term': 'CREDIT', 'order_note': 'Back door',
    }


def test_create_order_submits_cart_and_clears_it(salesperson, api):
    api.on('GET', '/salesperson/get-products', 200, PRODUCTS)
    assert salesperson.add_to_cart(1, 5, 2)['ok']

    result = salesperson.create_order(7, _order_details())
    assert result['message'] == 'Order created successfully!'
    payload = api.last('POST', '/salesperson/create-order')['json']
    assert payload['salespersonId'] == 7
    assert payload['totalAmount'] == 380.0
    assert payload['paymentTerm'] == 'CREDIT'
    assert payload['items'][0]['variantId'] == 5
    assert salesperson.cart_service.get_cart()['items'] == []


def test_create_order_failure_keeps_cart(salesperson, api):
    api.on('GET', '/salesperson/get-products', 200, PRODUCTS)
    salesperson.add_to_cart(2, '', 1)
    api.on('POST', '/salesperson/create-order', raises=ApiError('x', 400, {'message': 'Distributor inactive'}))

    result = salesperson.create_order(7, _order_details())
    assert result['error'] == 'Distributor inactive'
    assert salesperson.cart_service.get_cart()['items_count'] == 1

    api.on('POST', '/salesperson/create-order', raises=ApiError('x', 500))
    assert salesperson.create_order(7, _order_details())['error'] == 'Something went wrong. Please try again.'


def test_create_order_with_empty_cart(salesperson, api):
    result = salesperson.create_order(7, _order_details())
    assert result['errors'] == ['Please add at least one item to the order']
