"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. The browser client speaks camelCase; every model
also accepts the snake_case field names.

Quantities are deliberately left unconstrained here: the domain rejects
non-positive quantities with a 400, the way it does for every other rule.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(CamelModel):
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None


class LineRequest(CamelModel):
    product_id: str
    quantity: int


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------
class ProductResponse(CamelModel):
    id: str
    name: str
    image_url: str | None = None
    category: str | None = None
    price: float
    weight: str | None = None
    count_in_stock: int = 0


class CreateProductRequest(CamelModel):
    name: str
    price: float
    weight: str | None = None
    count_in_stock: int = 0
    image_url: str | None = None
    category: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Ceylon Black Tea",
                    "price": 1000.0,
                    "weight": "500g",
                    "countInStock": 25,
                    "category": "Tea",
                }
            ]
        },
    )


class UpdateProductRequest(CamelModel):
    name: str | None = None
    price: float | None = None
    weight: str | None = None
    count_in_stock: int | None = None
    image_url: str | None = None
    category: str | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(CamelModel):
    product_id: str
    quantity: int = 1


class SetQuantityRequest(CamelModel):
    quantity: int


class MergeCartRequest(CamelModel):
    cart_items: list[LineRequest] = []


class CheckoutRequest(CamelModel):
    payment_method: str
    shipping_address: ShippingAddressSchema | None = None


class CartLineResponse(CamelModel):
    product: ProductResponse | None = None
    product_id: str
    quantity: int


class CartResponse(CamelModel):
    cart_items: list[CartLineResponse] = []
    items_price: float = 0.0
    shipping_price: float = 0.0
    total_price: float = 0.0
    total_weight: float = 0.0


class EmptyCartResponse(CamelModel):
    cart_items: list[CartLineResponse] = []


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CreateOrderRequest(CamelModel):
    order_items: list[LineRequest] = []
    payment_method: str
    shipping_address: ShippingAddressSchema | None = None

    # Client-computed totals are accepted and ignored
    items_price: float | None = None
    shipping_price: float | None = None
    total_price: float | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "orderItems": [{"productId": "prod-001", "quantity": 3}],
                    "paymentMethod": "PayHere",
                    "shippingAddress": {
                        "address": "12 Galle Road",
                        "city": "Colombo",
                        "postalCode": "00300",
                        "country": "Sri Lanka",
                    },
                }
            ]
        },
    )


class PayOrderRequest(CamelModel):
    id: str | None = None
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None


class OrderItemResponse(CamelModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    image_url: str | None = None


class PaymentResultResponse(CamelModel):
    transaction_id: str
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None


class OrderResponse(CamelModel):
    id: str
    customer_id: str
    order_items: list[OrderItemResponse]
    shipping_address: ShippingAddressSchema
    payment_method: str | None = None
    items_price: float
    shipping_price: float
    total_price: float
    is_paid: bool
    paid_at: datetime | None = None
    payment_result: PaymentResultResponse | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Payment gateway
# ---------------------------------------------------------------------------
class PaymentHashRequest(CamelModel):
    order_id: str
    amount: float | str
    currency: str = "LKR"


class PaymentHashResponse(CamelModel):
    hash: str
    merchant_id: str
    amount: str
    currency: str


class StatusResponse(CamelModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(CamelModel):
    name: str
    email: str


class CustomerIdResponse(CamelModel):
    customer_id: str


class AddressRequest(CamelModel):
    label: str | None = None
    recipient_name: str | None = None
    phone: str | None = None
    address: str
    city: str
    postal_code: str
    country: str
    is_default: bool = False


class UpdateAddressRequest(CamelModel):
    label: str | None = None
    recipient_name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None
    is_default: bool = False


class AddressResponse(CamelModel):
    id: str
    label: str | None = None
    recipient_name: str | None = None
    phone: str | None = None
    address: str
    city: str
    postal_code: str
    country: str
    is_default: bool
