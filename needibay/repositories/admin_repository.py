# ==============================================================================
# ADMIN REPOSITORY - /admin/* endpoints
# ==============================================================================

from typing import Any, Dict, List, Optional

from needibay.repositories.api_client import ApiResponse
from needibay.repositories.base import ApiRepository


class AdminRepository(ApiRepository):

    # Distributors ------------------------------------------------------------

    def create_distributor(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post('/admin/create-distributor', json=payload)

    def get_distributors(self) -> List[dict]:
        return self._as_list(self._get('/admin/get-distributors').data)

    def delete_distributor(self, distributor_id: Any) -> ApiResponse:
        return self._delete(f'/admin/distributor/{distributor_id}')

    # Salespersons ------------------------------------------------------------

    def create_salesperson(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._post('/admin/create-salesperson', json=payload)

    def get_salespersons(self) -> List[dict]:
        return self._as_list(self._get('/admin/get-salesperson').data)

    # Catalog -----------------------------------------------------------------

    def get_categories(self) -> List[dict]:
        return self._as_list(self._get('/admin/get-categories').data)

    def create_category(self, name: str) -> ApiResponse:
        return self._post('/admin/create-category', json={'name': name})

    def create_product(self, fields: Dict[str, str], image: Optional[tuple] = None) -> ApiResponse:
        """
        Multipart create.

        Args:
            fields: string form fields (variants already JSON-encoded)
            image: (filename, stream, content_type) or None
        """
        files = {'image': image} if image else None
        return self._post('/admin/create-product', data=fields, files=files)

    def get_products(self) -> List[dict]:
        return self._as_list(self._get('/admin/get-products').data)

    def update_product(self, product_id: Any, changes: Dict[str, Any]) -> ApiResponse:
        return self._put(f'/admin/product/{product_id}', json=changes)

    def add_variants(self, product_id: Any, variants: List[Dict[str, Any]]) -> ApiResponse:
        return self._post(f'/admin/products/{product_id}/variants', json={'variants': variants})

    def delete_product(self, product_id: Any) -> ApiResponse:
        return self._delete(f'/admin/product/{product_id}')

    # Shops / orders ----------------------------------------------------------

    def get_shops(self) -> List[dict]:
        return self._as_list(self._get('/admin/get-shops').data)

    def get_orders(self) -> List[dict]:
        return self._as_list(self._get('/admin/get-orders').data)
