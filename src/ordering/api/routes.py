"""FastAPI routes for the Ordering domain — orders, payment settlement and administration.

The session layer in front of this API authenticates the caller and forwards
its identity in the X-User-Id, X-User-Email and X-User-Role headers.
"""

import math

from fastapi import APIRouter, Depends, Header, Query
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    ActionResponse,
    AddressSchema,
    CouponIdResponse,
    CouponSummarySchema,
    CreateCouponRequest,
    CreateOrderRequest,
    CreatePaymentRequest,
    CreatePaymentResponse,
    OrderDetailResponse,
    OrderItemSchema,
    OrderListResponse,
    OrderStatusResponse,
    OrderSummarySchema,
    PaginationSchema,
    PlacedOrderResponse,
    PlacedOrderSchema,
    SettledOrderResponse,
    SettledOrderSchema,
    TrackingEventSchema,
    UpdateOrderRequest,
    UpdateOrderStatusRequest,
    VerifyPaymentRequest,
)
from ordering.coupon.management import CreateCoupon
from ordering.errors import InvalidRequest, Unauthenticated
from ordering.order import service
from ordering.order.queries import order_detail, orders_for_user
from payments.gateway import get_gateway


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
class Session:
    def __init__(self, user_id: str, email: str | None = None, role: str | None = None) -> None:
        self.user_id = user_id
        self.email = email
        self.role = role


def current_session(
    x_user_id: str = Header(default=""),
    x_user_email: str = Header(default=""),
    x_user_role: str = Header(default=""),
) -> Session:
    if not x_user_id:
        raise Unauthenticated("Unauthorized")
    return Session(user_id=x_user_id, email=x_user_email or None, role=x_user_role or None)


def admin_session(session: Session = Depends(current_session)) -> Session:
    if (session.role or "").upper() != "ADMIN":
        raise Unauthenticated("Unauthorized")
    return session


def _items(lines) -> list[dict]:
    return [line.model_dump() for line in lines]


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlacedOrderResponse)
async def create_order(body: CreateOrderRequest, session: Session = Depends(current_session)) -> PlacedOrderResponse:
    order = service.place_order(
        user_id=session.user_id,
        address_id=body.address_id,
        payment_method=body.payment_method,
        items=_items(body.items),
        coupon_code=body.coupon_code,
        notes=body.notes,
        user_email=session.email,
    )
    return PlacedOrderResponse(
        order=PlacedOrderSchema(
            id=str(order.id),
            order_number=order.order_number,
            total=order.total,
            payment_method=order.payment_method,
        )
    )


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: Session = Depends(current_session),
) -> OrderListResponse:
    orders, total = orders_for_user(session.user_id, page=page, limit=limit)
    return OrderListResponse(
        orders=[
            OrderSummarySchema(
                id=str(order.id),
                order_number=order.order_number,
                status=order.status,
                payment_status=order.payment_status,
                payment_method=order.payment_method,
                total=order.total,
                item_count=len(order.items),
                created_at=order.created_at,
            )
            for order in orders
        ],
        pagination=PaginationSchema(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
    )


@order_router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: str, session: Session = Depends(current_session)) -> OrderDetailResponse:
    detail = order_detail(order_id, session.user_id)
    order, address, coupon = detail["order"], detail["address"], detail["coupon"]

    return OrderDetailResponse(
        id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        payment_id=order.payment_id,
        subtotal=order.subtotal,
        discount=order.discount,
        shipping_charge=order.shipping_charge,
        total=order.total,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemSchema(
                id=str(item.id),
                product_id=str(item.product_id),
                variant_id=str(item.variant_id) if item.variant_id else None,
                product_name=item.product_name,
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items
        ],
        address=(
            AddressSchema(
                name=address.name,
                phone=address.phone,
                street=address.street,
                landmark=address.landmark,
                city=address.city,
                state=address.state,
                pincode=address.pincode,
                label=address.label,
            )
            if address is not None
            else None
        ),
        tracking=[
            TrackingEventSchema(status=event.status, message=event.message, created_at=event.created_at)
            for event in order.timeline(newest_first=True)
        ],
        coupon=(
            CouponSummarySchema(
                code=coupon.code,
                discount_type=coupon.discount_type,
                discount_value=coupon.discount_value,
            )
            if coupon is not None
            else None
        ),
    )


@order_router.patch("/{order_id}", response_model=ActionResponse)
async def update_order(
    order_id: str, body: UpdateOrderRequest, session: Session = Depends(current_session)
) -> ActionResponse:
    if body.action != "cancel":
        raise InvalidRequest("Invalid action", action=body.action)
    service.cancel_order(session.user_id, order_id)
    return ActionResponse(message="Order cancelled successfully")


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payment", tags=["payment"])


@payment_router.post("/create", response_model=CreatePaymentResponse)
async def create_payment(
    body: CreatePaymentRequest, session: Session = Depends(current_session)
) -> CreatePaymentResponse:
    gateway_order = service.open_payment_order(
        user_id=session.user_id,
        amount=body.amount,
        address_id=body.order_data.address_id if body.order_data else None,
    )
    return CreatePaymentResponse(
        razorpay_order_id=gateway_order.gateway_order_id,
        amount=gateway_order.amount,
        currency=gateway_order.currency,
        key_id=get_gateway().public_key,
    )


@payment_router.post("/verify", response_model=SettledOrderResponse)
async def verify_payment(
    body: VerifyPaymentRequest, session: Session = Depends(current_session)
) -> SettledOrderResponse:
    order = service.settle_paid_order(
        user_id=session.user_id,
        gateway_order_id=body.razorpay_order_id,
        gateway_payment_id=body.razorpay_payment_id,
        signature=body.razorpay_signature,
        address_id=body.order_data.address_id,
        items=_items(body.order_data.items),
        coupon_code=body.order_data.coupon_code,
        notes=body.order_data.notes,
        user_email=session.email,
    )
    return SettledOrderResponse(order=SettledOrderSchema(id=str(order.id), order_number=order.order_number))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(admin_session)])


def _status_response(order) -> OrderStatusResponse:
    return OrderStatusResponse(
        id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
    )


@admin_router.patch("/orders/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderStatusResponse:
    return _status_response(service.change_order_status(order_id, body.status))


@admin_router.post("/orders/{order_id}/refund", response_model=OrderStatusResponse)
async def refund_order(order_id: str) -> OrderStatusResponse:
    return _status_response(service.refund_order(order_id))


@admin_router.post("/coupons", status_code=201, response_model=CouponIdResponse)
async def create_coupon(body: CreateCouponRequest) -> CouponIdResponse:
    command = CreateCoupon(
        code=body.code,
        description=body.description,
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        min_purchase=body.min_purchase,
        max_discount=body.max_discount,
        usage_limit=body.usage_limit,
        start_date=body.start_date,
        end_date=body.end_date,
        is_active=body.is_active,
    )
    coupon_id = current_domain.process(command, asynchronous=False)
    return CouponIdResponse(id=coupon_id, code=body.code.strip().upper())
