"""FastAPI routes for the Storefront: products, cart, orders and accounts.

Every cart and order route acts on behalf of the caller resolved from the
bearer token; the customer id never comes from the request body.
"""

import json
import os

from fastapi import APIRouter, Depends, Form, HTTPException
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_identity, require_admin
from storefront.api.schemas import (
    AddressRequest,
    AddressResponse,
    AddToCartRequest,
    CartLineResponse,
    CartResponse,
    CheckoutRequest,
    CreateOrderRequest,
    CreateProductRequest,
    CustomerIdResponse,
    EmptyCartResponse,
    MergeCartRequest,
    OrderItemResponse,
    OrderResponse,
    PaymentHashRequest,
    PaymentHashResponse,
    PaymentResultResponse,
    PayOrderRequest,
    ProductResponse,
    RegisterCustomerRequest,
    SetQuantityRequest,
    ShippingAddressSchema,
    StatusResponse,
    UpdateAddressRequest,
    UpdateProductRequest,
)
from storefront.cart.consistency import process_cart_command
from storefront.cart.items import AddToCart, RemoveFromCart, SetCartItemQuantity
from storefront.cart.management import ClearCart, MergeGuestCart
from storefront.cart.view import get_cart
from storefront.catalogue.lookup import list_products
from storefront.catalogue.management import AddProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.customer.addresses import AddAddress, RemoveAddress, UpdateAddress
from storefront.customer.customer import Customer
from storefront.customer.registration import RegisterCustomer
from storefront.identity import Identity, get_identity_provider
from storefront.identity.fake_adapter import FakeIdentityProvider
from storefront.order.creation import CheckoutCart, PlaceOrder
from storefront.order.delivery import MarkOrderDelivered
from storefront.order.order import Order
from storefront.order.payment import ConfirmGatewayPayment, RecordOrderPayment, sign_order_payment
from storefront.payment.signer import format_amount, verify_notification

ADMIN_TOKEN_ENVIRONMENTS = ("test", "development")


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        image_url=product.image_url,
        category=product.category,
        price=product.price,
        weight=product.weight,
        count_in_stock=product.count_in_stock or 0,
    )


def _cart_response(customer_id: str) -> CartResponse:
    view = get_cart(customer_id)
    return CartResponse(
        cart_items=[
            CartLineResponse(
                product=_product_response(line.product) if line.product is not None else None,
                product_id=line.product_id,
                quantity=line.quantity,
            )
            for line in view.lines
        ],
        items_price=view.quote.items_price,
        shipping_price=view.quote.shipping_price,
        total_price=view.quote.total_price,
        total_weight=view.quote.total_weight,
    )


def _order_response(order: Order) -> OrderResponse:
    payment_result = None
    if order.payment_result is not None:
        payment_result = PaymentResultResponse(
            transaction_id=order.payment_result.transaction_id,
            status=order.payment_result.status,
            update_time=order.payment_result.update_time,
            email_address=order.payment_result.email_address,
        )

    return OrderResponse(
        id=str(order.id),
        customer_id=str(order.customer_id),
        order_items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                image_url=item.image_url,
            )
            for item in order.items
        ],
        shipping_address=ShippingAddressSchema(
            address=order.shipping_address.address,
            city=order.shipping_address.city,
            postal_code=order.shipping_address.postal_code,
            country=order.shipping_address.country,
        ),
        payment_method=order.payment_method,
        items_price=order.items_price,
        shipping_price=order.shipping_price,
        total_price=order.total_price,
        is_paid=order.is_paid,
        paid_at=order.paid_at,
        payment_result=payment_result,
        is_delivered=order.is_delivered,
        delivered_at=order.delivered_at,
        created_at=order.created_at,
    )


def _address_list(customer_id: str) -> list[AddressResponse]:
    customer = current_domain.repository_for(Customer).get(customer_id)
    return [
        AddressResponse(
            id=str(address.id),
            label=address.label,
            recipient_name=address.recipient_name,
            phone=address.phone,
            address=address.address,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
            is_default=address.is_default,
        )
        for address in customer.addresses
    ]


def _shipping_json(address: ShippingAddressSchema | None) -> str | None:
    if address is None:
        return None
    return json.dumps(address.model_dump())


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def get_products() -> list[ProductResponse]:
    return [_product_response(product) for product in list_products()]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(current_domain.repository_for(Product).get(product_id))


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(body: CreateProductRequest, admin: Identity = Depends(require_admin)) -> ProductResponse:
    command = AddProduct(
        name=body.name,
        price=body.price,
        weight=body.weight,
        count_in_stock=body.count_in_stock,
        image_url=body.image_url,
        category=body.category,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return _product_response(current_domain.repository_for(Product).get(product_id))


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str, body: UpdateProductRequest, admin: Identity = Depends(require_admin)
) -> ProductResponse:
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return _product_response(current_domain.repository_for(Product).get(product_id))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def view_cart(identity: Identity = Depends(current_identity)) -> CartResponse:
    return _cart_response(identity.customer_id)


@cart_router.post("", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, identity: Identity = Depends(current_identity)) -> CartResponse:
    command = AddToCart(
        customer_id=identity.customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    process_cart_command(command)
    return _cart_response(identity.customer_id)


@cart_router.post("/merge", response_model=CartResponse)
async def merge_cart(body: MergeCartRequest, identity: Identity = Depends(current_identity)) -> CartResponse:
    if body.cart_items:
        command = MergeGuestCart(
            customer_id=identity.customer_id,
            items=json.dumps([line.model_dump() for line in body.cart_items]),
        )
        process_cart_command(command)
    return _cart_response(identity.customer_id)


@cart_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout_cart(body: CheckoutRequest, identity: Identity = Depends(current_identity)) -> OrderResponse:
    command = CheckoutCart(
        customer_id=identity.customer_id,
        payment_method=body.payment_method,
        shipping_address=_shipping_json(body.shipping_address),
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(current_domain.repository_for(Order).get(order_id))


@cart_router.put("/{product_id}", response_model=CartResponse)
async def set_cart_item_quantity(
    product_id: str, body: SetQuantityRequest, identity: Identity = Depends(current_identity)
) -> CartResponse:
    command = SetCartItemQuantity(
        customer_id=identity.customer_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    process_cart_command(command)
    return _cart_response(identity.customer_id)


@cart_router.delete("/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, identity: Identity = Depends(current_identity)) -> CartResponse:
    command = RemoveFromCart(customer_id=identity.customer_id, product_id=product_id)
    process_cart_command(command)
    return _cart_response(identity.customer_id)


@cart_router.delete("", response_model=EmptyCartResponse)
async def clear_cart(identity: Identity = Depends(current_identity)) -> EmptyCartResponse:
    current_domain.process(ClearCart(customer_id=identity.customer_id), asynchronous=False)
    return EmptyCartResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, identity: Identity = Depends(current_identity)) -> OrderResponse:
    """Place an order. Any totals in the body are ignored and recomputed."""
    command = PlaceOrder(
        customer_id=identity.customer_id,
        items=json.dumps([line.model_dump() for line in body.order_items]),
        payment_method=body.payment_method,
        shipping_address=_shipping_json(body.shipping_address),
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(current_domain.repository_for(Order).get(order_id))


@order_router.get("", response_model=list[OrderResponse])
async def all_orders(admin: Identity = Depends(require_admin)) -> list[OrderResponse]:
    return [_order_response(order) for order in current_domain.repository_for(Order).newest_first()]


@order_router.get("/myorders", response_model=list[OrderResponse])
async def my_orders(identity: Identity = Depends(current_identity)) -> list[OrderResponse]:
    orders = current_domain.repository_for(Order).for_customer(identity.customer_id)
    return [_order_response(order) for order in orders]


@order_router.post("/generate-payhere-hash", response_model=PaymentHashResponse)
async def generate_payhere_hash(
    body: PaymentHashRequest, identity: Identity = Depends(current_identity)
) -> PaymentHashResponse:
    """Sign a gateway checkout session for one of the caller's unpaid orders."""
    order = current_domain.repository_for(Order).visible_to(body.order_id, identity.customer_id, identity.is_admin)
    signed = sign_order_payment(order, body.amount, body.currency)
    return PaymentHashResponse(
        hash=signed.hash,
        merchant_id=signed.merchant_id,
        amount=format_amount(order.total_price),
        currency=body.currency,
    )


@order_router.post("/payhere-notify", response_model=StatusResponse)
async def payhere_notify(
    merchant_id: str = Form(...),
    order_id: str = Form(...),
    payhere_amount: str = Form(...),
    payhere_currency: str = Form(...),
    status_code: str = Form(...),
    md5sig: str = Form(...),
    payment_id: str | None = Form(default=None),
) -> StatusResponse:
    """Server-to-server payment notification from the gateway."""
    try:
        verified = verify_notification(merchant_id, order_id, payhere_amount, payhere_currency, status_code, md5sig)
    except ValueError:
        verified = False
    if not verified:
        raise HTTPException(status_code=401, detail="Invalid notification signature")

    command = ConfirmGatewayPayment(
        order_id=order_id,
        payment_id=payment_id,
        status_code=status_code,
        amount=payhere_amount,
        currency=payhere_currency,
    )
    changed = current_domain.process(command, asynchronous=False)
    return StatusResponse(status="paid" if changed else "acknowledged")


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, identity: Identity = Depends(current_identity)) -> OrderResponse:
    order = current_domain.repository_for(Order).visible_to(order_id, identity.customer_id, identity.is_admin)
    return _order_response(order)


@order_router.put("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(
    order_id: str, body: PayOrderRequest, identity: Identity = Depends(current_identity)
) -> OrderResponse:
    repo = current_domain.repository_for(Order)
    repo.visible_to(order_id, identity.customer_id, identity.is_admin)

    command = RecordOrderPayment(
        order_id=order_id,
        transaction_id=body.id,
        status=body.status,
        update_time=body.update_time,
        email_address=body.email_address,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(repo.get(order_id))


@order_router.put("/{order_id}/deliver", response_model=OrderResponse)
async def deliver_order(order_id: str, admin: Identity = Depends(require_admin)) -> OrderResponse:
    current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)
    return _order_response(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Account Router
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/users", tags=["users"])


@account_router.post("", status_code=201, response_model=CustomerIdResponse)
async def register_customer(body: RegisterCustomerRequest) -> CustomerIdResponse:
    command = RegisterCustomer(name=body.name, email=body.email)
    customer_id = current_domain.process(command, asynchronous=False)
    return CustomerIdResponse(customer_id=customer_id)


@account_router.post("/{customer_id}/token")
async def issue_dev_token(customer_id: str, is_admin: bool = False) -> dict:
    """Issue a bearer token from the in-memory identity provider (non-production only).

    Admin tokens are only issued when ``PROTEAN_ENV`` is explicitly ``test``
    or ``development``.
    """
    environment = os.environ.get("PROTEAN_ENV")
    if environment == "production":
        raise HTTPException(status_code=403, detail="Token issuance not available in production")
    if is_admin and environment not in ADMIN_TOKEN_ENVIRONMENTS:
        raise HTTPException(status_code=403, detail="Admin token issuance only available in test or development")

    provider = get_identity_provider()
    if not isinstance(provider, FakeIdentityProvider):
        raise HTTPException(status_code=400, detail="Token issuance only available for FakeIdentityProvider")

    current_domain.repository_for(Customer).get(customer_id)
    return {"token": provider.issue(customer_id, is_admin=is_admin)}


@account_router.get("/profile/addresses", response_model=list[AddressResponse])
async def list_addresses(identity: Identity = Depends(current_identity)) -> list[AddressResponse]:
    return _address_list(identity.customer_id)


@account_router.post("/profile/addresses", status_code=201, response_model=list[AddressResponse])
async def add_address(body: AddressRequest, identity: Identity = Depends(current_identity)) -> list[AddressResponse]:
    command = AddAddress(customer_id=identity.customer_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return _address_list(identity.customer_id)


@account_router.put("/profile/addresses/{address_id}", response_model=list[AddressResponse])
async def update_address(
    address_id: str, body: UpdateAddressRequest, identity: Identity = Depends(current_identity)
) -> list[AddressResponse]:
    command = UpdateAddress(
        customer_id=identity.customer_id,
        address_id=address_id,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    return _address_list(identity.customer_id)


@account_router.delete("/profile/addresses/{address_id}", response_model=list[AddressResponse])
async def remove_address(address_id: str, identity: Identity = Depends(current_identity)) -> list[AddressResponse]:
    command = RemoveAddress(customer_id=identity.customer_id, address_id=address_id)
    current_domain.process(command, asynchronous=False)
    return _address_list(identity.customer_id)
