# ==============================================================================
# FORM SCHEMAS - pydantic models for every form the screens submit
# ==============================================================================
# Forms arrive as snake_case dicts (Flask request.form) and leave as the
# camelCase JSON the server expects (payload()). Error messages are the
# user-facing texts shown in the flash alert.
# ==============================================================================

import json
import re
from datetime import date
from typing import Any, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from needibay.models.entities import (
    SHOP_DELIVERY_SLOTS,
    OrderStatus,
    PaymentStatus,
    PaymentTerm,
)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

SchemaT = TypeVar('SchemaT', bound='FormSchema')


class FormSchema(BaseModel):
    """Base for all forms: camelCase aliases, stripped strings, defaults validated."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_default=True,
        use_enum_values=True,
    )

    def payload(self) -> dict:
        """JSON body for the API (camelCase, None fields omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True, mode='json')


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required(value: str, message: str) -> str:
    if _blank(value):
        raise ValueError(message)
    return value


def _check_phone(value: str, too_short: str, too_long: str) -> str:
    if len(value) < 10:
        raise ValueError(too_short)
    if len(value) > 15:
        raise ValueError(too_long)
    if not value.isdigit():
        raise ValueError("Phone number must only contain digits")
    return value


def _check_email(value: str) -> str:
    if not EMAIL_RE.match(value or ''):
        raise ValueError("Invalid email format")
    return value


def format_errors(exc: ValidationError) -> List[str]:
    """Flatten a ValidationError into unique, user-facing messages."""
    messages = []
    for err in exc.errors():
        msg = err.get('msg', '')
        if msg.startswith('Value error, '):
            msg = msg[len('Value error, '):]
        elif err.get('type') in ('missing', 'int_parsing', 'float_parsing', 'date_from_datetime_parsing', 'date_parsing'):
            field_name = '.'.join(str(part) for part in err.get('loc', ()))
            msg = f"{field_name}: {msg}"
        if msg not in messages:
            messages.append(msg)
    return messages


def validate_form(schema: Type[SchemaT], data: dict) -> Tuple[Optional[SchemaT], List[str]]:
    """
    Validate raw form data.

    Returns:
        (form, []) when valid, (None, messages) otherwise
    """
    try:
        return schema.model_validate(data), []
    except ValidationError as exc:
        return None, format_errors(exc)


# ==============================================================================
# AUTH
# ==============================================================================

class LoginForm(FormSchema):
    email: str = ''
    password: str = ''

    @model_validator(mode='after')
    def _both_required(self):
        if _blank(self.email) or _blank(self.password):
            raise ValueError('Both email and password are required.')
        return self


# ==============================================================================
# ADMIN FORMS
# ==============================================================================

class DistributorForm(FormSchema):
    name: str = ''
    email: str = ''
    password: str = ''
    phone_number: str = ''
    gst_number: Optional[str] = None
    pan: Optional[str] = None
    address: str = ''

    @field_validator('gst_number', 'pan', mode='before')
    @classmethod
    def _blank_to_none(cls, value):
        return None if _blank(value) else value

    @field_validator('name')
    @classmethod
    def _name(cls, value):
        return _required(value, "Name is required")

    @field_validator('email')
    @classmethod
    def _email(cls, value):
        return _check_email(value)

    @field_validator('password')
    @classmethod
    def _password(cls, value):
        if len(value or '') < 6:
            raise ValueError("Password must be at least 6 characters long")
        return value

    @field_validator('phone_number')
    @classmethod
    def _phone(cls, value):
        return _check_phone(
            value,
            "Phone number must be at least 10 characters long",
            "Phone number must be at most 15 characters long",
        )

    @field_validator('pan')
    @classmethod
    def _pan(cls, value):
        if value is not None and len(value) != 10:
            raise ValueError("PAN must be exactly 10 characters long")
        return value

    @field_validator('address')
    @classmethod
    def _address(cls, value):
        return _required(value, "Address is required")


class SalespersonForm(FormSchema):
    email: str = ''
    password: str = ''
    name: str = ''
    phone_number: str = ''
    employee_id: str = ''

    @field_validator('email')
    @classmethod
    def _email(cls, value):
        return _check_email(value)

    @field_validator('password')
    @classmethod
    def _password(cls, value):
        if len(value or '') < 6:
            raise ValueError("Password must be at least 6 characters long")
        return value

    @field_validator('name')
    @classmethod
    def _name(cls, value):
        return _required(value, "Name is required")

    @field_validator('phone_number')
    @classmethod
    def _phone(cls, value):
        return _check_phone(value, "Check phone number again", "Phone number must be at most 15 digits")

    @field_validator('employee_id')
    @classmethod
    def _employee_id(cls, value):
        return _required(value, "Employee ID is required")


class CategoryForm(FormSchema):
    name: str = ''

    @field_validator('name')
    @classmethod
    def _name(cls, value):
        return _required(value, 'Please enter a category name.')


class VariantForm(FormSchema):
    variant_name: str = ''
    variant_value: str = ''
    price: float = 0.0
    stock_quantity: int = 0

    @field_validator('price', 'stock_quantity', mode='before')
    @classmethod
    def _blank_number(cls, value):
        return 0 if _blank(value) else value

    @field_validator('variant_name')
    @classmethod
    def _name(cls, value):
        return _required(value, 'Variant name is required')

    @field_validator('price')
    @classmethod
    def _price(cls, value):
        if value < 0:
            raise ValueError('Variant price cannot be negative')
        return value

    @field_validator('stock_quantity')
    @classmethod
    def _stock(cls, value):
        if value < 0:
            raise ValueError('Variant stock cannot be negative')
        return value


class ProductForm(FormSchema):
    name: str = ''
    distributor_price: Optional[float] = None
    retailer_price: Optional[float] = None
    mrp: Optional[float] = None
    category_id: str = ''
    inventory_count: Optional[int] = None
    variants: List[VariantForm] = []

    @field_validator('distributor_price', 'retailer_price', 'mrp', 'inventory_count', mode='before')
    @classmethod
    def _blank_number(cls, value):
        return None if _blank(value) else value

    @field_validator('category_id', mode='before')
    @classmethod
    def _category_as_text(cls, value):
        return '' if value is None else str(value)

    @model_validator(mode='after')
    def _required_fields(self):
        required = (self.name, self.distributor_price, self.retailer_price,
                    self.mrp, self.category_id, self.inventory_count)
        if any(_blank(v) for v in required):
            raise ValueError('Please fill in all required fields.')
        if min(self.distributor_price, self.retailer_price, self.mrp) < 0:
            raise ValueError('Prices cannot be negative.')
        if self.inventory_count < 0:
            raise ValueError('Inventory count cannot be negative.')
        return self

    def multipart_fields(self) -> dict:
        """
        Non-file fields of the multipart create request.
        Every value is sent as a string; variants as one JSON string.
        """
        data = self.payload()
        variants = data.pop('variants', [])
        fields = {key: str(value) for key, value in data.items()}
        fields["variants"] = json.dumps(variants)
        return fields


class ProductUpdateForm(FormSchema):
    """Partial product edit: every field optional, only given ones are checked."""
    name: Optional[str] = None
    distributor_price: Optional[float] = None
    retailer_price: Optional[float] = None
    mrp: Optional[float] = None
    inventory_count: Optional[int] = None

    @field_validator('name', 'distributor_price', 'retailer_price', 'mrp', 'inventory_count', mode='before')
    @classmethod
    def _blank_to_none(cls, value):
        return None if _blank(value) else value

    @model_validator(mode='after')
    def _non_negative(self):
        for value in (self.distributor_price, self.retailer_price, self.mrp, self.inventory_count):
            if value is not None and value < 0:
                raise ValueError('Prices and inventory cannot be negative.')
        return self


# ==============================================================================
# SALESPERSON FORMS
# ==============================================================================

class ShopForm(FormSchema):
    name: str = ''
    owner_name: str = ''
    contact_number: str = ''
    email: str = ''
    gps_location: str = ''
    preferred_delivery_slot: str = SHOP_DELIVERY_SLOTS[0]

    @field_validator('preferred_delivery_slot', mode='before')
    @classmethod
    def _default_slot(cls, value):
        return SHOP_DELIVERY_SLOTS[0] if _blank(value) else value

    @model_validator(mode='after')
    def _required_fields(self):
        if any(_blank(v) for v in (self.name, self.owner_name, self.contact_number, self.email)):
            raise ValueError('Please fill out all required fields.')
        if self.preferred_delivery_slot not in SHOP_DELIVERY_SLOTS:
            raise ValueError('Please choose a valid delivery slot.')
        return self


class OrderLine(FormSchema):
    """One cart line as sent to /salesperson/create-order."""
    product_id: Any
    quantity: int
    product_name: str = ''
    price: float = 0.0
    variant_id: Optional[Any] = None
    variant_name: Optional[str] = None

    @field_validator('quantity')
    @classmethod
    def _quantity(cls, value):
        if value < 1:
            raise ValueError('Quantity must be at least 1')
        return value


class OrderForm(FormSchema):
    shopkeeper_id: int = 0
    distributor_id: int = 0
    salesperson_id: int = 0
    delivery_date: Optional[date] = None
    delivery_slot: str = ''
    payment_term: PaymentTerm = PaymentTerm.COD
    order_note: Optional[str] = None
    total_amount: float = 0.0
    items: List[OrderLine] = []

    @field_validator('shopkeeper_id', 'distributor_id', 'salesperson_id', mode='before')
    @classmethod
    def _blank_id(cls, value):
        return 0 if _blank(value) else value

    @field_validator('delivery_date', 'order_note', mode='before')
    @classmethod
    def _blank_to_none(cls, value):
        return None if _blank(value) else value

    @field_validator('shopkeeper_id')
    @classmethod
    def _shopkeeper(cls, value):
        if value == 0:
            raise ValueError('Please select a shopkeeper')
        return value

    @field_validator('distributor_id')
    @classmethod
    def _distributor(cls, value):
        if value == 0:
            raise ValueError('Please select a distributor')
        return value

    @field_validator('delivery_date')
    @classmethod
    def _delivery_date(cls, value):
        if value is None:
            raise ValueError('Please select a delivery date')
        if value < date.today():
            raise ValueError('Delivery date cannot be in the past')
        return value

    @field_validator('delivery_slot')
    @classmethod
    def _delivery_slot(cls, value):
        return _required(value, 'Please select a delivery slot')

    @field_validator('items')
    @classmethod
    def _items(cls, value):
        if not value:
            raise ValueError('Please add at least one item to the order')
        return value


# ==============================================================================
# DISTRIBUTOR FORMS
# ==============================================================================

class OrderUpdateForm(FormSchema):
    delivery_date: Optional[date] = None
    delivery_slot: str = ''
    status: str = ''

    @field_validator('delivery_date', mode='before')
    @classmethod
    def _blank_date(cls, value):
        return None if _blank(value) else value

    @field_validator('delivery_date')
    @classmethod
    def _date(cls, value):
        if value is None:
            raise ValueError('Please select a delivery date')
        return value

    @field_validator('delivery_slot')
    @classmethod
    def _slot(cls, value):
        return _required(value, 'Please select a delivery slot')

    @field_validator('status')
    @classmethod
    def _status(cls, value):
        value = (value or '').upper()
        if value not in {s.value for s in OrderStatus}:
            raise ValueError('Please select a valid status')
        return value

    @field_serializer('delivery_date')
    def _timestamp(self, value):
        # midnight UTC timestamp, the format the order endpoint stores
        return f"{value.isoformat()}T00:00:00.000Z" if value else None


def parse_quantity(text: Any) -> int:
    """Quantity input as typed: leading integer, anything unparseable is 0."""
    match = re.match(r'\s*([+-]?\d+)', str(text if text is not None else ''))
    return int(match.group(1)) if match else 0


class QuantityLine(FormSchema):
    product_id: Any
    quantity: int = 0
    product_name: str = ''
    variant_id: Optional[Any] = None

    @field_validator('quantity', mode='before')
    @classmethod
    def _parse(cls, value):
        return parse_quantity(value)


class QuantityUpdateForm(FormSchema):
    items: List[QuantityLine] = []

    @model_validator(mode='after')
    def _positive(self):
        if not self.items or any(line.quantity <= 0 for line in self.items):
            raise ValueError('Please ensure all quantities are greater than 0')
        return self

    def payload(self) -> dict:
        return {
            'items': [
                {'productId': line.product_id, 'variantId': line.variant_id, 'quantity': line.quantity}
                for line in self.items
            ]
        }


class PartialPaymentForm(FormSchema):
    initial_amount: Optional[float] = None
    remaining_amount: Optional[float] = None
    due_date: Optional[date] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING

    @field_validator('initial_amount', 'remaining_amount', mode='before')
    @classmethod
    def _blank_amount(cls, value):
        return None if _blank(value) else value

    @field_validator('due_date', mode='before')
    @classmethod
    def _default_due_date(cls, value):
        return date.today() if _blank(value) else value

    @field_validator('payment_status', mode='before')
    @classmethod
    def _default_status(cls, value):
        return PaymentStatus.PENDING.value if _blank(value) else str(value).lower()

    @model_validator(mode='after')
    def _amounts(self):
        if self.initial_amount is None or self.remaining_amount is None:
            raise ValueError('Please fill in all required fields')
        if self.initial_amount < 0 or self.remaining_amount < 0:
            raise ValueError('Amounts cannot be negative')
        return self

    def matches_total(self, total: float) -> bool:
        """initial + remaining equals the order total, to the cent."""
        return round((self.initial_amount or 0) + (self.remaining_amount or 0), 2) == round(total or 0, 2)
