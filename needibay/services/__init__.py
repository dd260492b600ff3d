# ==============================================================================
# SERVICE LAYER - screen logic between the routes and the repositories
# ==============================================================================
# Services validate forms, call repositories and return result dicts
# ({'ok': True, ...} / {'ok': False, 'error': ...}). Routes only flash and
# redirect.
# ==============================================================================

from .auth_service import AuthService
from .admin_service import AdminService
from .distributor_service import DistributorService
from .cart_service import CartService
from .salesperson_service import SalespersonService
from .order_report_service import OrderReportService

__all__ = [
    'AuthService',
    'AdminService',
    'DistributorService',
    'CartService',
    'SalespersonService',
    'OrderReportService',
]
