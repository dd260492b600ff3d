# ==============================================================================
# SALESPERSON SERVICE
# ==============================================================================
# Create shop, create order (with the session cart) and the salesperson's
# order history.
# ==============================================================================

import logging
from typing import Any, Dict, Optional

from needibay.models.entities import Distributor, Order, Product, Shop
from needibay.models.schemas import OrderForm, ShopForm, validate_form
from needibay.repositories.api_client import ApiError
from needibay.repositories.salesperson_repository import SalespersonRepository
from needibay.services.cart_service import CartService
from needibay.services.results import failure, invalid, success

logger = logging.getLogger(__name__)

GENERIC_ERROR = 'Something went wrong. Please try again.'


class SalespersonService:
    """Screen logic of the salesperson role."""

    def __init__(self, salesperson_repo: SalespersonRepository, cart_service: CartService):
        self.salesperson_repo = salesperson_repo
        self.cart_service = cart_service

    # =========================================================================
    # SHOPS
    # =========================================================================

    def create_shop(self, data: Dict[str, Any], salesperson_id: Any, image: Optional[tuple] = None) -> Dict[str, Any]:
        """
        Register a shop (shopkeeper) for this salesperson.

        Args:
            data: name, owner_name, contact_number, email, gps_location,
                  preferred_delivery_slot
            salesperson_id: id of the logged-in salesperson
            image: multipart file tuple or None
        """
        form, errors = validate_form(ShopForm, data)
        if errors:
            return invalid(errors)

        fields = {key: str(value) for key, value in form.payload().items()}
        fields['salespersonId'] = str(salesperson_id)

        try:
            resp = self.salesperson_repo.create_shop(fields, image)
        except ApiError as e:
            logger.warning("Create shop failed: %s", e)
            return failure(e.server_message or 'Phone number already taken.')
        if resp.status_code != 201:
            return failure(GENERIC_ERROR)
        logger.info("Shop %r created by salesperson %s", form.name, salesperson_id)
        return success('Shopkeeper created successfully!')

    # =========================================================================
    # ORDERS
    # =========================================================================

    def order_form_data(self, salesperson_id: Any) -> Dict[str, Any]:
        """Products, the salesperson's shops and the distributors for the order form."""
        try:
            products = self.salesperson_repo.get_products()
            shops = self.salesperson_repo.get_shops(salesperson_id)
            distributors = self.salesperson_repo.get_distributors()
        except ApiError as e:
            logger.warning("Fetch order form data failed: %s", e)
            return failure(
                'Could not fetch data. Please try again later.',
                products=[], shops=[], distributors=[],
            )
        return success(
            products=[Product.from_dict(p) for p in products],
            shops=[Shop.from_dict(s) for s in shops],
            distributors=[Distributor.from_dict(d) for d in distributors],
        )

    def get_product(self, product_id: Any) -> Optional[Product]:
        try:
            rows = self.salesperson_repo.get_products()
        except ApiError as e:
            logger.warning("Fetch products failed: %s", e)
            return None
        for row in rows:
            if str(row.get('id')) == str(product_id):
                return Product.from_dict(row)
        return None

    def add_to_cart(self, product_id: Any, variant_id: Any, quantity: Any) -> Dict[str, Any]:
        product = self.get_product(product_id)
        if product is None:
            return failure('Please select a product')
        return self.cart_service.add_item(product, variant_id, quantity)

    def create_order(self, salesperson_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit the session cart as an order.

        Args:
            salesperson_id: id of the logged-in salesperson
            data: shopkeeper_id, distributor_id, delivery_date, delivery_slot,
                  payment_term, order_note

        The cart is cleared only when the server accepts the order.
        """
        cart = self.cart_service.get_cart()
        payload = dict(data)
        payload.update(
            salesperson_id=salesperson_id,
            items=self.cart_service.order_lines(),
            total_amount=cart['total'],
        )
        form, errors = validate_form(OrderForm, payload)
        if errors:
            return invalid(errors)

        try:
            self.salesperson_repo.create_order(form.payload())
        except ApiError as e:
            logger.warning("Create order failed: %s", e)
            return failure(e.server_message or GENERIC_ERROR)

        self.cart_service.clear()
        logger.info(
            "Order created by salesperson %s for shop %s (%d item(s), total %.2f)",
            salesperson_id, form.shopkeeper_id, len(form.items), form.total_amount,
        )
        return success('Order created successfully!')

    def list_orders(self, salesperson_id: Any) -> Dict[str, Any]:
        try:
            rows = self.salesperson_repo.get_orders(salesperson_id)
        except ApiError as e:
            logger.warning("Fetch orders of salesperson %s failed: %s", salesperson_id, e)
            return failure('Failed to fetch orders. Please try again later.', orders=[])
        return success(orders=[Order.from_dict(r) for r in rows])
