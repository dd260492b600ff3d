# ==============================================================================
# SALESPERSON REPOSITORY - /salesperson/* endpoints
# ==============================================================================

from typing import Any, Dict, List, Optional

from needibay.repositories.api_client import ApiResponse
from needibay.repositories.base import ApiRepository


class SalespersonRepository(ApiRepository):

    def get_products(self) -> List[dict]:
        return self._as_list(self._get('/salesperson/get-products').data)

    def get_shops(self, salesperson_id: Any) -> List[dict]:
        return self._as_list(self._get(f'/salesperson/{salesperson_id}/shops').data)

    def get_distributors(self) -> List[dict]:
        return self._as_list(self._get('/salesperson/get-distributors').data)

    def create_shop(self, fields: Dict[str, str], image: Optional[tuple] = None) -> ApiResponse:
        files = {'image': image} if image else None
        return self._post('/salesperson/create-shop', data=fields, files=files)

    def create_order(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post('/salesperson/create-order', json=payload)

    def get_orders(self, salesperson_id: Any) -> List[dict]:
        return self._as_list(self._get(f'/salesperson/orders/{salesperson_id}').data)
