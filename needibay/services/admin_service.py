# ==============================================================================
# ADMIN SERVICE
# ==============================================================================
# Create forms (distributor, salesperson, category, product) and the view
# lists (distributors, salespersons, products, shops, orders) of the admin.
#
# Every mutation is followed by a fresh GET of the list on the next page
# render; nothing is updated optimistically.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from needibay.models.entities import (
    Category,
    Distributor,
    Order,
    Product,
    Salesperson,
    Shop,
)
from needibay.models.schemas import (
    CategoryForm,
    DistributorForm,
    ProductForm,
    ProductUpdateForm,
    SalespersonForm,
    VariantForm,
    validate_form,
)
from needibay.repositories.admin_repository import AdminRepository
from needibay.repositories.api_client import ApiError
from needibay.services.results import failure, invalid, success

logger = logging.getLogger(__name__)

GENERIC_ERROR = 'Something went wrong. Please try again.'


class AdminService:
    """
    Screen logic of the admin role.

    Every method returns a result dict: {'ok': True, ...} with the data the
    page needs, or {'ok': False, 'error': message}.
    """

    def __init__(self, admin_repo: AdminRepository):
        self.admin_repo = admin_repo

    # =========================================================================
    # CREATE FORMS
    # =========================================================================

    def create_distributor(self, data: Dict[str, Any]) -> Dict[str, Any]:
        form, errors = validate_form(DistributorForm, data)
        if errors:
            return invalid(errors)
        try:
            resp = self.admin_repo.create_distributor(form.payload())
        except ApiError as e:
            logger.warning("Create distributor failed: %s", e)
            return failure(GENERIC_ERROR)
        if resp.status_code != 201:
            return failure(GENERIC_ERROR)
        logger.info("Distributor %s created", form.email)
        return success('Distributor created successfully!')

    def create_salesperson(self, data: Dict[str, Any]) -> Dict[str, Any]:
        form, errors = validate_form(SalespersonForm, data)
        if errors:
            return invalid(errors)
        try:
            resp = self.admin_repo.create_salesperson(form.payload())
        except ApiError as e:
            logger.warning("Create salesperson failed: %s", e)
            return failure(GENERIC_ERROR)
        if resp.status_code != 201:
            return failure(GENERIC_ERROR)
        logger.info("Salesperson %s created", form.email)
        return success('Salesperson created successfully!')

    def list_categories(self) -> Dict[str, Any]:
        try:
            rows = self.admin_repo.get_categories()
        except ApiError as e:
            logger.warning("Fetch categories failed: %s", e)
            return failure('Unable to fetch categories. Please try again.', categories=[])
        return success(categories=[Category.from_dict(r) for r in rows])

    def create_category(self, name: str) -> Dict[str, Any]:
        """Create a category; the new one is returned so the form can select it."""
        form, errors = validate_form(CategoryForm, {'name': name})
        if errors:
            return invalid(errors)
        try:
            resp = self.admin_repo.create_category(form.name)
        except ApiError as e:
            logger.warning("Create category failed: %s", e)
            return failure('Failed to create category. Please try again.')
        if resp.status_code != 201:
            return failure('Failed to create category. Please try again.')
        category = Category.from_dict(resp.data) if isinstance(resp.data, dict) else None
        return success('Category created successfully!', category=category)

    def create_product(self, data: Dict[str, Any], image: Optional[tuple] = None) -> Dict[str, Any]:
        """
        Create a product with its variants and an optional image.

        Args:
            data: form fields, ``variants`` as a list of dicts
            image: multipart file tuple (see image_part) or None
        """
        form, errors = validate_form(ProductForm, data)
        if errors:
            return invalid(errors)
        try:
            self.admin_repo.create_product(form.multipart_fields(), image)
        except ApiError as e:
            logger.warning("Create product failed: %s", e)
            return failure('Failed to create product. Please try again.')
        logger.info("Product %r created with %d variant(s)", form.name, len(form.variants))
        return success('Product created successfully!')

    # =========================================================================
    # DISTRIBUTORS / SALESPERSONS
    # =========================================================================

    def list_distributors(self) -> Dict[str, Any]:
        try:
            rows = self.admin_repo.get_distributors()
        except ApiError as e:
            logger.warning("Fetch distributors failed: %s", e)
            return failure('Failed to fetch distributors. Please try again.', distributors=[])
        return success(distributors=[Distributor.from_dict(r) for r in rows])

    def delete_distributor(self, distributor_id: Any) -> Dict[str, Any]:
        try:
            self.admin_repo.delete_distributor(distributor_id)
        except ApiError as e:
            logger.warning("Delete distributor %s failed: %s", distributor_id, e)
            return failure('Failed to delete distributor. Please try again.')
        logger.info("Distributor %s deleted", distributor_id)
        return success('Distributor deleted successfully')

    def list_salespersons(self) -> Dict[str, Any]:
        try:
            rows = self.admin_repo.get_salespersons()
        except ApiError as e:
            logger.warning("Fetch salespersons failed: %s", e)
            return failure('Failed to fetch salespeople. Please try again.', salespersons=[])
        return success(salespersons=[Salesperson.from_dict(r) for r in rows])

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def list_products(self) -> Dict[str, Any]:
        try:
            rows = self.admin_repo.get_products()
        except ApiError as e:
            logger.warning("Fetch products failed: %s", e)
            return failure('Could not fetch data. Please try again later.', products=[])
        return success(products=[Product.from_dict(r) for r in rows])

    def get_product(self, product_id: Any) -> Optional[Product]:
        result = self.list_products()
        for product in result['products']:
            if str(product.id) == str(product_id):
                return product
        return None

    @staticmethod
    def search_products(products: List[Product], query: str) -> List[Product]:
        """Case-insensitive substring match on the product name."""
        q = (query or '').strip().lower()
        if not q:
            return list(products)
        return [p for p in products if q in (p.name or '').lower()]

    @staticmethod
    def product_changes(product: Product, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Only the fields whose new value differs from the product's current one."""
        current = product.editable_fields()
        changes = {}
        for key, value in updates.items():
            if key not in current or value is None:
                continue
            old = current[key]
            if isinstance(old, (int, float)) and not isinstance(old, bool):
                try:
                    if float(value) == float(old):
                        continue
                except (TypeError, ValueError):
                    pass
            elif value == old:
                continue
            changes[key] = value
        return changes

    def update_product(self, product_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        form, errors = validate_form(ProductUpdateForm, data)
        if errors:
            return invalid(errors)

        product = self.get_product(product_id)
        if product is None:
            return failure('Failed to update product. Please try again.')

        changes = self.product_changes(product, form.payload())
        if not changes:
            return failure('No changes were made to the product.', no_changes=True)

        try:
            self.admin_repo.update_product(product_id, changes)
        except ApiError as e:
            logger.warning("Update product %s failed: %s", product_id, e)
            return failure('Failed to update product. Please try again.')
        logger.info("Product %s updated: %s", product_id, sorted(changes))
        return success('Product updated successfully', changes=changes)

    def add_variant(self, product_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        form, errors = validate_form(VariantForm, data)
        if errors:
            return invalid(errors)
        try:
            self.admin_repo.add_variants(product_id, [form.payload()])
        except ApiError as e:
            logger.warning("Add variant to product %s failed: %s", product_id, e)
            return failure('Failed to add variant. Please try again.')
        return success('Variant added successfully')

    def delete_product(self, product_id: Any) -> Dict[str, Any]:
        try:
            self.admin_repo.delete_product(product_id)
        except ApiError as e:
            logger.warning("Delete product %s failed: %s", product_id, e)
            return failure('Failed to delete product. Please try again.')
        logger.info("Product %s deleted", product_id)
        return success('Product deleted successfully')

    # =========================================================================
    # SHOPS / ORDERS
    # =========================================================================

    def list_shops(self) -> Dict[str, Any]:
        try:
            rows = self.admin_repo.get_shops()
        except ApiError as e:
            logger.warning("Fetch shops failed: %s", e)
            return failure('Could not fetch data. Please try again later.', shops=[])
        return success(shops=[Shop.from_dict(r) for r in rows])

    @staticmethod
    def search_shops(shops: List[Shop], query: str) -> List[Shop]:
        """Match on shop name or owner name, case-insensitive."""
        q = (query or '').strip().lower()
        if not q:
            return list(shops)
        return [
            s for s in shops
            if q in (s.name or '').lower() or q in (s.owner_name or '').lower()
        ]

    def list_orders(self) -> Dict[str, Any]:
        try:
            rows = self.admin_repo.get_orders()
        except ApiError as e:
            logger.warning("Fetch orders failed: %s", e)
            return failure('Failed to fetch orders. Please try again later.', orders=[])
        return success(orders=[Order.from_dict(r) for r in rows])
