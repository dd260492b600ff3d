# ==============================================================================
# DISTRIBUTOR REPOSITORY - /distributor/* endpoints
# ==============================================================================

from typing import Any, Dict, List

from needibay.repositories.api_client import ApiResponse
from needibay.repositories.base import ApiRepository


class DistributorRepository(ApiRepository):

    def get_orders(self) -> List[dict]:
        """Orders of the logged-in distributor (nested under 'responseOrders')."""
        return self._as_list(self._get('/distributor/get-orders').data, key='responseOrders')

    def update_order(self, order_id: Any, payload: Dict[str, Any]) -> ApiResponse:
        """PUT of partial order fields (delivery date/slot/status, or items)."""
        return self._put(f'/distributor/orders/{order_id}', json=payload)

    def update_partial_payment(self, order_id: Any, payload: Dict[str, Any]) -> ApiResponse:
        return self._put(f'/distributor/orders/{order_id}/partial-payment', json=payload)
