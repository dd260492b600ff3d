# ==============================================================================
# DOMAIN ENTITIES - dataclasses mirroring the server's JSON
# ==============================================================================
# The client owns none of these records. They are parsed from API responses
# (from_dict) and, where the server expects them back, serialised (to_dict).
# Keys missing from a response fall back to empty values.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# ==============================================================================
# ENUMS
# ==============================================================================

class Role(str, Enum):
    """User roles returned by /auth/login."""
    ADMIN = "ADMIN"
    DISTRIBUTOR = "DISTRIBUTOR"
    SALESPERSON = "SALESPERSON"


class OrderStatus(str, Enum):
    """Order statuses. Any status can be requested from any other."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DISPATCHED = "DISPATCHED"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"


class PaymentTerm(str, Enum):
    COD = "COD"
    CREDIT = "CREDIT"
    PARTIAL = "PARTIAL"


class PaymentStatus(str, Enum):
    """Status of a partial payment."""
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"


# Delivery slots offered when a salesperson creates an order
ORDER_DELIVERY_SLOTS = (
    '9:00 AM - 11:00 AM',
    '11:00 AM - 1:00 PM',
    '2:00 PM - 4:00 PM',
    '4:00 PM - 6:00 PM',
)

# Delivery slots a distributor can move an order to
DISTRIBUTOR_DELIVERY_SLOTS = ('11AM-2PM', '4PM-9PM')

# Preferred delivery slot of a new shop
SHOP_DELIVERY_SLOTS = ('11:00 AM - 2:00 PM', '4:00 PM - 9:00 PM')

STATUS_COLORS = {
    'PENDING': '#FFA500',
    'DELIVERED': '#28A745',
    'CANCELED': '#DC3545',
}


def status_color(status: str) -> str:
    """Badge colour for an order status; unknown statuses are neutral."""
    return STATUS_COLORS.get((status or '').upper(), '#808080')


def parse_date(value: Any) -> Optional[date]:
    """
    Parse the server's date strings ('2024-05-01', '2024-05-01T10:00:00.000Z').

    Returns:
        date or None when the value is empty or not a date
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ==============================================================================
# USERS
# ==============================================================================

@dataclass
class User:
    """
    The logged-in user as returned by /auth/login.

    Attributes:
        id: server id (salesperson id for SALESPERSON users)
        email: login email
        role: ADMIN, DISTRIBUTOR or SALESPERSON (raw string when unknown)
    """
    id: int
    email: str
    role: str
    name: str = ''

    @property
    def role_enum(self) -> Optional[Role]:
        try:
            return Role(self.role)
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'email': self.email, 'role': self.role, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=data.get('id'),
            email=data.get('email', ''),
            role=str(data.get('role', '')).upper(),
            name=data.get('name', '') or '',
        )


@dataclass
class Distributor:
    id: Any
    name: str
    email: str = ''
    phone_number: str = ''
    gst_number: Optional[str] = None
    pan: Optional[str] = None
    address: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Distributor':
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            email=data.get('email', ''),
            phone_number=data.get('phoneNumber', ''),
            gst_number=data.get('gstNumber'),
            pan=data.get('pan'),
            address=data.get('address', ''),
        )


@dataclass
class Salesperson:
    id: Any
    name: str
    email: str = ''
    phone_number: str = ''
    employee_id: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Salesperson':
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            email=data.get('email', ''),
            phone_number=data.get('phoneNumber', ''),
            employee_id=data.get('employeeId', ''),
        )


@dataclass
class Shop:
    id: Any
    name: str
    owner_name: str = ''
    contact_number: str = ''
    email: str = ''
    gps_location: str = ''
    preferred_delivery_slot: str = ''
    image_url: Optional[str] = None
    balance: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Shop':
        balance = data.get('balance')
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            owner_name=data.get('ownerName', ''),
            contact_number=data.get('contactNumber', ''),
            email=data.get('email', ''),
            gps_location=data.get('gpsLocation', '') or '',
            preferred_delivery_slot=data.get('preferredDeliverySlot', '') or '',
            image_url=data.get('imageUrl') or data.get('image'),
            balance=_to_float(balance) if balance is not None else None,
        )


# ==============================================================================
# CATALOG
# ==============================================================================

@dataclass
class Category:
    id: Any
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(id=data.get('id'), name=data.get('name', ''))


@dataclass
class Variant:
    """
    A product variant (e.g. "Size" / "1kg").

    Attributes:
        variant_name: attribute name
        variant_value: attribute value
        price: price of this variant, used instead of the distributor price
        stock_quantity: units in stock
    """
    variant_name: str
    variant_value: str
    price: float = 0.0
    stock_quantity: int = 0
    id: Any = None

    def label(self) -> str:
        if self.variant_value:
            return f"{self.variant_name} - {self.variant_value}"
        return self.variant_name

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'variantName': self.variant_name,
            'variantValue': self.variant_value,
            'price': self.price,
            'stockQuantity': self.stock_quantity,
        }
        if self.id is not None:
            data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Variant':
        return cls(
            id=data.get('id'),
            variant_name=data.get('variantName', ''),
            variant_value=data.get('variantValue', ''),
            price=_to_float(data.get('price')),
            stock_quantity=_to_int(data.get('stockQuantity')),
        )


@dataclass
class Product:
    id: Any
    name: str
    distributor_price: float = 0.0
    retailer_price: float = 0.0
    mrp: float = 0.0
    inventory_count: int = 0
    category_id: Any = None
    category_name: str = ''
    image_url: Optional[str] = None
    variants: List[Variant] = field(default_factory=list)

    def get_variant(self, variant_id: Any) -> Optional[Variant]:
        if variant_id in (None, ''):
            return None
        for variant in self.variants:
            if str(variant.id) == str(variant_id):
                return variant
        return None

    def editable_fields(self) -> Dict[str, Any]:
        """Fields the admin can edit, keyed as the server names them."""
        return {
            'name': self.name,
            'distributorPrice': self.distributor_price,
            'retailerPrice': self.retailer_price,
            'mrp': self.mrp,
            'inventoryCount': self.inventory_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        category = data.get('category') or {}
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            distributor_price=_to_float(data.get('distributorPrice')),
            retailer_price=_to_float(data.get('retailerPrice')),
            mrp=_to_float(data.get('mrp')),
            inventory_count=_to_int(data.get('inventoryCount')),
            category_id=data.get('categoryId', category.get('id')),
            category_name=category.get('name', ''),
            image_url=data.get('imageUrl') or data.get('image'),
            variants=[Variant.from_dict(v) for v in data.get('variants') or []],
        )


# ==============================================================================
# ORDERS
# ==============================================================================

@dataclass
class PartialPayment:
    """
    Split payment of an order.
    initial_amount + remaining_amount is expected to equal the order total.
    """
    initial_amount: float
    remaining_amount: float
    due_date: Optional[date] = None
    payment_status: str = PaymentStatus.PENDING.value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PartialPayment':
        return cls(
            initial_amount=_to_float(data.get('initialAmount')),
            remaining_amount=_to_float(data.get('remainingAmount')),
            due_date=parse_date(data.get('dueDate')),
            payment_status=data.get('paymentStatus') or PaymentStatus.PENDING.value,
        )


@dataclass
class OrderItem:
    """One order line. ``price`` is the unit price used for the total."""
    product_id: Any
    product_name: str
    quantity: int
    price: float = 0.0
    variant_id: Any = None
    variant_name: Optional[str] = None
    id: Any = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def describe(self) -> str:
        """'Rice (1kg) x3' style description used by the order report."""
        text = f"{self.product_name} ({self.variant_name})" if self.variant_name else self.product_name
        return f"{text} x{self.quantity}" if self.quantity > 0 else text

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderItem':
        product = data.get('product') or {}
        variant = data.get('variant')
        variant_name = data.get('variantName')
        if variant_name is None:
            variant_name = variant.get('variantName') if isinstance(variant, dict) else variant
        price = data.get('price')
        if price is None:
            price = product.get('retailerPrice')
        return cls(
            id=data.get('id'),
            product_id=data.get('productId', product.get('id')),
            product_name=data.get('productName') or product.get('name', ''),
            quantity=_to_int(data.get('quantity')),
            price=_to_float(price),
            variant_id=data.get('variantId'),
            variant_name=variant_name or None,
        )


@dataclass
class Order:
    """
    An order as listed by the server.

    The admin/salesperson listing and the distributor listing use different
    key names; from_dict accepts both.
    """
    id: Any
    status: str
    total_amount: float
    delivery_date: Optional[date] = None
    delivery_slot: str = ''
    order_date: Optional[date] = None
    payment_term: str = ''
    shop_name: str = ''
    shopkeeper_id: Any = None
    contact_number: str = ''
    shop_balance: Optional[float] = None
    employee_name: str = ''
    distributor_name: str = ''
    items: List[OrderItem] = field(default_factory=list)
    partial_payment: Optional[PartialPayment] = None
    order_note: str = ''

    @property
    def status_color(self) -> str:
        return status_color(self.status)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        shopkeeper = data.get('shopkeeper') or {}
        balance = shopkeeper.get('balance')
        lines = data.get('items')
        if lines is None:
            lines = data.get('products') or []
        partial = data.get('partialPayment')
        return cls(
            id=data.get('orderId', data.get('id')),
            status=data.get('status') or '',
            total_amount=_to_float(data.get('totalAmount')),
            delivery_date=parse_date(data.get('deliveryDate')),
            delivery_slot=data.get('deliverySlot', '') or '',
            order_date=parse_date(data.get('orderDate') or data.get('createdAt')),
            payment_term=data.get('paymentType') or data.get('paymentTerm') or '',
            shop_name=data.get('shopName') or shopkeeper.get('name') or '',
            shopkeeper_id=data.get('shopkeeperId', shopkeeper.get('id')),
            contact_number=data.get('contactNumber') or shopkeeper.get('contactNumber') or '',
            shop_balance=_to_float(balance) if balance is not None else None,
            employee_name=data.get('employeeName', '') or '',
            distributor_name=data.get('distributorName', '') or '',
            items=[OrderItem.from_dict(line) for line in lines],
            partial_payment=PartialPayment.from_dict(partial) if partial else None,
            order_note=data.get('orderNote', '') or '',
        )
