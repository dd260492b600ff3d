# ==============================================================================
# ORDER CART SERVICE
# ==============================================================================
# Item picker of the salesperson's create-order screen. Lines and the running
# total live in the Flask session under 'order_cart' / 'order_total'.
# ==============================================================================

from typing import Any, Dict, List

from flask import session

from needibay.models.entities import Product
from needibay.models.schemas import parse_quantity
from needibay.services.results import failure, success

CART_KEY = 'order_cart'
TOTAL_KEY = 'order_total'


class CartService:
    """
    Session cart for one order being built.

    Each line is {product_id, product_name, variant_id, variant_name, price,
    quantity}. The unit price is the chosen variant's price, otherwise the
    product's distributor price.
    """

    def _get_cart(self) -> List[Dict[str, Any]]:
        return session.get(CART_KEY, [])

    def _save_cart(self, cart: List[Dict[str, Any]], total: float) -> None:
        session[CART_KEY] = cart
        session[TOTAL_KEY] = round(total, 2)
        session.modified = True

    def get_cart(self) -> Dict[str, Any]:
        cart = self._get_cart()
        return {
            'items': cart,
            'total': session.get(TOTAL_KEY, 0.0),
            'items_count': len(cart),
        }

    def add_item(self, product: Product, variant_id: Any, quantity: Any) -> Dict[str, Any]:
        """
        Add a line and increase the total by price x quantity.

        Args:
            product: product chosen in the picker
            variant_id: chosen variant (empty for none)
            quantity: raw quantity input
        """
        if product is None:
            return failure('Invalid action')

        qty = parse_quantity(quantity)
        if qty < 1:
            return failure('Quantity must be a positive number')

        variant = product.get_variant(variant_id)
        if variant is None and variant_id not in (None, ''):
            return failure('Please select a valid variant')
        price = variant.price if variant else product.distributor_price

        cart = self._get_cart()
        cart.append({
            'product_id': product.id,
            'product_name': product.name,
            'variant_id': variant.id if variant else None,
            'variant_name': variant.label() if variant else None,
            'price': price,
            'quantity': qty,
        })
        total = session.get(TOTAL_KEY, 0.0) + price * qty
        self._save_cart(cart, total)

        return success(f"{product.name} added to the order", cart=self.get_cart())

    def remove_item(self, index: int) -> Dict[str, Any]:
        """Remove the line at ``index`` and take its price x quantity off the total."""
        cart = self._get_cart()
        if index is None or not 0 <= index < len(cart):
            return failure('Invalid action')

        item = cart.pop(index)
        total = session.get(TOTAL_KEY, 0.0) - item['price'] * item['quantity']
        self._save_cart(cart, max(total, 0.0))
        return success(cart=self.get_cart())

    def clear(self) -> None:
        self._save_cart([], 0.0)

    def order_lines(self) -> List[Dict[str, Any]]:
        """Cart lines keyed as the create-order schema expects them."""
        return [
            {
                'product_id': item['product_id'],
                'product_name': item['product_name'],
                'variant_id': item['variant_id'],
                'variant_name': item['variant_name'],
                'price': item['price'],
                'quantity': item['quantity'],
            }
            for item in self._get_cart()
        ]
