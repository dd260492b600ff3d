# ==============================================================================
# DISTRIBUTOR SERVICE
# ==============================================================================
# The distributor's order screen: list, update delivery/status, edit line
# quantities and record a partial payment. The server is the source of
# truth; every page render after a mutation fetches the full list again.
# No status transition is enforced client-side.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from needibay.models.entities import Order
from needibay.models.schemas import (
    OrderUpdateForm,
    PartialPaymentForm,
    QuantityUpdateForm,
    validate_form,
)
from needibay.repositories.api_client import ApiError
from needibay.repositories.distributor_repository import DistributorRepository
from needibay.services.results import failure, invalid, success

logger = logging.getLogger(__name__)

GENERIC_ERROR = 'Something went wrong. Please try again.'


class DistributorService:

    def __init__(self, distributor_repo: DistributorRepository):
        self.distributor_repo = distributor_repo

    def list_orders(self) -> Dict[str, Any]:
        try:
            rows = self.distributor_repo.get_orders()
        except ApiError as e:
            logger.warning("Fetch distributor orders failed: %s", e)
            return failure('Failed to fetch orders. Please try again later.', orders=[])
        return success(orders=[Order.from_dict(r) for r in rows])

    def get_order(self, order_id: Any) -> Optional[Order]:
        for order in self.list_orders()['orders']:
            if str(order.id) == str(order_id):
                return order
        return None

    def confirm_update(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate an order update without sending it.
        The confirmation step shows the returned summary before the PUT.
        """
        form, errors = validate_form(OrderUpdateForm, data)
        if errors:
            return invalid(errors)
        return success(summary={
            'delivery_date': form.delivery_date.strftime('%d/%m/%Y'),
            'delivery_slot': form.delivery_slot,
            'status': form.status,
        })

    def update_order(self, order_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        PUT the new delivery date, slot and status.

        Args:
            data: delivery_date (YYYY-MM-DD), delivery_slot, status
        """
        form, errors = validate_form(OrderUpdateForm, data)
        if errors:
            return invalid(errors)
        try:
            resp = self.distributor_repo.update_order(order_id, form.payload())
        except ApiError as e:
            logger.warning("Update order %s failed: %s", order_id, e)
            return failure(GENERIC_ERROR)
        if resp.status_code != 200:
            return failure(GENERIC_ERROR)
        logger.info("Order %s updated to %s", order_id, form.status)
        return success('Order updated successfully!')

    def update_quantities(self, order_id: Any, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Replace the line quantities of an order.

        Args:
            items: [{'product_id', 'variant_id', 'quantity' (raw input)}]
        """
        form, errors = validate_form(QuantityUpdateForm, {'items': items})
        if errors:
            return invalid(errors)
        try:
            resp = self.distributor_repo.update_order(order_id, form.payload())
        except ApiError as e:
            logger.warning("Update quantities of order %s failed: %s", order_id, e)
            return failure(GENERIC_ERROR)
        if resp.status_code != 200:
            return failure(GENERIC_ERROR)
        return success('Order updated successfully!')

    def update_partial_payment(self, order: Order, data: Dict[str, Any]) -> Dict[str, Any]:
        """Record the advance / balance split; both must add up to the order total."""
        form, errors = validate_form(PartialPaymentForm, data)
        if errors:
            return invalid(errors)
        if not form.matches_total(order.total_amount):
            return failure(
                f"Initial and remaining amounts must add up to the order total ({order.total_amount:.2f})"
            )
        try:
            resp = self.distributor_repo.update_partial_payment(order.id, form.payload())
        except ApiError as e:
            logger.warning("Update partial payment of order %s failed: %s", order.id, e)
            return failure(GENERIC_ERROR)
        if resp.status_code != 200:
            return failure(GENERIC_ERROR)
        logger.info("Partial payment of order %s set to %s", order.id, form.payment_status)
        return success('Order updated successfully!')
