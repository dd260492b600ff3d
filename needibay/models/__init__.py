# ==============================================================================
# MODELS - entities parsed from the API and the pydantic form schemas
# ==============================================================================

from .entities import (
    Role,
    OrderStatus,
    PaymentTerm,
    PaymentStatus,
    ORDER_DELIVERY_SLOTS,
    DISTRIBUTOR_DELIVERY_SLOTS,
    SHOP_DELIVERY_SLOTS,
    status_color,
    parse_date,
    User,
    Distributor,
    Salesperson,
    Shop,
    Category,
    Variant,
    Product,
    PartialPayment,
    OrderItem,
    Order,
)

__all__ = [
    'Role',
    'OrderStatus',
    'PaymentTerm',
    'PaymentStatus',
    'ORDER_DELIVERY_SLOTS',
    'DISTRIBUTOR_DELIVERY_SLOTS',
    'SHOP_DELIVERY_SLOTS',
    'status_color',
    'parse_date',
    'User',
    'Distributor',
    'Salesperson',
    'Shop',
    'Category',
    'Variant',
    'Product',
    'PartialPayment',
    'OrderItem',
    'Order',
]
