"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Fields are snake_case in Python and camelCase on
the wire.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class CamelModel(BaseModel):
    model_config = _CAMEL


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderLineRequest(CamelModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)


class OrderDataSchema(CamelModel):
    address_id: str
    coupon_code: str | None = None
    notes: str | None = None
    items: list[OrderLineRequest]


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(OrderDataSchema):
    payment_method: Literal["COD", "RAZORPAY", "UPI"]

    model_config = {
        **_CAMEL,
        "json_schema_extra": {
            "examples": [
                {
                    "addressId": "addr-001",
                    "paymentMethod": "COD",
                    "couponCode": "FIRST10",
                    "notes": "Leave at the door",
                    "items": [{"productId": "prod-001", "variantId": "var-001", "quantity": 2}],
                }
            ]
        },
    }


class PaymentOrderDataSchema(CamelModel):
    address_id: str | None = None


class CreatePaymentRequest(CamelModel):
    amount: float | None = None
    order_data: PaymentOrderDataSchema | None = None


class VerifyPaymentRequest(CamelModel):
    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str
    order_data: OrderDataSchema


class UpdateOrderRequest(CamelModel):
    action: str


class UpdateOrderStatusRequest(CamelModel):
    status: Literal["PENDING", "CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED", "RETURNED"]


class CreateCouponRequest(CamelModel):
    code: str = Field(min_length=3, max_length=20)
    description: str | None = None
    discount_type: Literal["PERCENTAGE", "FIXED"]
    discount_value: float = Field(gt=0)
    min_purchase: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=0)
    start_date: datetime
    end_date: datetime
    is_active: bool = True


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PlacedOrderSchema(CamelModel):
    id: str
    order_number: str
    total: float
    payment_method: str


class PlacedOrderResponse(CamelModel):
    order: PlacedOrderSchema


class CreatePaymentResponse(CamelModel):
    razorpay_order_id: str
    amount: int
    currency: str
    key_id: str | None = None


class SettledOrderSchema(CamelModel):
    id: str
    order_number: str


class SettledOrderResponse(CamelModel):
    success: bool = True
    order: SettledOrderSchema


class ActionResponse(CamelModel):
    success: bool = True
    message: str


class OrderSummarySchema(CamelModel):
    id: str
    order_number: str
    status: str
    payment_status: str
    payment_method: str
    total: float
    item_count: int
    created_at: datetime | None = None


class PaginationSchema(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OrderListResponse(CamelModel):
    orders: list[OrderSummarySchema]
    pagination: PaginationSchema


class OrderItemSchema(CamelModel):
    id: str
    product_id: str
    variant_id: str | None = None
    product_name: str | None = None
    quantity: int
    price: float


class AddressSchema(CamelModel):
    name: str
    phone: str
    street: str
    landmark: str | None = None
    city: str
    state: str
    pincode: str
    label: str | None = None


class TrackingEventSchema(CamelModel):
    status: str
    message: str | None = None
    created_at: datetime | None = None


class CouponSummarySchema(CamelModel):
    code: str
    discount_type: str
    discount_value: float


class OrderDetailResponse(CamelModel):
    id: str
    order_number: str
    status: str
    payment_status: str
    payment_method: str
    payment_id: str | None = None
    subtotal: float
    discount: float
    shipping_charge: float
    total: float
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemSchema]
    address: AddressSchema | None = None
    tracking: list[TrackingEventSchema]
    coupon: CouponSummarySchema | None = None


class OrderStatusResponse(CamelModel):
    id: str
    order_number: str
    status: str
    payment_status: str


class CouponIdResponse(CamelModel):
    id: str
    code: str
