"""Pydantic request/response schemas for the marketplace API.

These are the external contracts; commands and aggregates stay internal.
"""

import base64
import binascii
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class DeliveryAddressSchema(BaseModel):
    full_address: str = Field(max_length=500)
    barangay: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    contact_phone: str | None = None


class DeliverySchema(BaseModel):
    type: str = "pickup"
    address: DeliveryAddressSchema | None = None
    fee: float = Field(ge=0, default=0.0)


class CartItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class PaymentProofSchema(BaseModel):
    filename: str
    content_base64: str

    @field_validator("content_base64")
    @classmethod
    def must_be_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Payment proof must be base64 encoded") from exc
        return value

    def content(self) -> bytes:
        return base64.b64decode(self.content_base64)


# ---------------------------------------------------------------------------
# Order requests
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    items: list[CartItemSchema]
    note: str | None = None
    payment_methods: dict[str, str] = Field(default_factory=dict)
    delivery: DeliverySchema = Field(default_factory=DeliverySchema)
    payment_proofs: dict[str, PaymentProofSchema] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "note": "Please pack separately",
                    "payment_methods": {"seller-001": "cod"},
                    "delivery": {"type": "pickup"},
                }
            ]
        }
    }


class UpdateStatusRequest(BaseModel):
    status: str
    note: str | None = Field(default=None, max_length=500)


class ArchiveRequest(BaseModel):
    archive: bool = True


class BulkArchiveRequest(BaseModel):
    order_ids: list[str]
    archive: bool = True


class BulkHideRequest(BaseModel):
    order_ids: list[str]


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Product requests
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    price: float = Field(ge=0)
    quantity: int = Field(ge=0, default=0)
    unit: str = "piece"
    category: str | None = None
    market_location: str
    image: str | None = None
    low_stock_threshold: int | None = Field(default=None, ge=0)
    is_available: bool = True


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    price: float | None = Field(default=None, ge=0)
    image: str | None = None
    is_available: bool | None = None
    low_stock_threshold: int | None = Field(default=None, ge=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class OrderLineResponse(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int
    unit: str
    image: str | None = None


class StatusEntryResponse(BaseModel):
    status: str
    note: str | None = None
    timestamp: datetime


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    seller_id: str
    lines: list[OrderLineResponse]
    total: float
    status: str
    payment_method: str
    payment_proof: str | None = None
    payment_verified: bool
    market_location: str
    note: str | None = None
    status_history: list[StatusEntryResponse]
    is_archived: bool
    is_hidden_by_buyer: bool
    delivery_type: str
    delivery_address: DeliveryAddressSchema | None = None
    delivery_fee: float
    created_at: datetime
    updated_at: datetime


class OrderEnvelope(BaseModel):
    success: bool = True
    order: OrderResponse


class OrdersCreatedResponse(BaseModel):
    success: bool = True
    message: str
    orders: list[OrderResponse]


class OrderListResponse(BaseModel):
    success: bool = True
    count: int
    orders: list[OrderResponse]


class SellerOrderListResponse(OrderListResponse):
    status_counts: dict[str, int]


class CountResponse(BaseModel):
    success: bool = True
    message: str
    modified_count: int


class StatusResponse(BaseModel):
    success: bool = True
    message: str = "ok"


class ProductResponse(BaseModel):
    id: str
    seller_id: str
    name: str
    description: str | None = None
    price: float
    quantity: int
    unit: str
    category: str | None = None
    market_location: str
    is_available: bool
    image: str | None = None
    low_stock_threshold: int
    is_low_stock: bool


class ProductIdResponse(BaseModel):
    success: bool = True
    product_id: str


class ProductEnvelope(BaseModel):
    success: bool = True
    product: ProductResponse


class CatalogueResponse(BaseModel):
    success: bool = True
    count: int
    products: list[ProductResponse]


class ProductListResponse(BaseModel):
    success: bool = True
    count: int
    low_stock_count: int
    products: list[ProductResponse]


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
class ProductSalesSchema(BaseModel):
    product_id: str | None = None
    name: str
    image: str | None = None
    quantity_sold: int
    revenue: float


class DailySalesSchema(BaseModel):
    date: date
    order_count: int
    revenue: float


class BucketSchema(BaseModel):
    order_count: int
    revenue: float


class MarketSalesSchema(BucketSchema):
    market: str


class AnalyticsResponse(BaseModel):
    success: bool = True
    period: str
    start: datetime | None = None
    end: datetime
    revenue: float
    previous_revenue: float
    revenue_change: float
    total_orders: int
    completed_orders: int
    pending_orders: int
    cancelled_orders: int
    status_breakdown: dict[str, int]
    payment_methods: dict[str, BucketSchema]
    top_products: list[ProductSalesSchema]
    daily_sales: list[DailySalesSchema]
    market_comparison: list[MarketSalesSchema]
