"""Pydantic API schemas for the Batching domain.

These are the external API contracts, separate from domain commands.
The API layer translates between these schemas and engine operations.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class OrderItemSnapshot(BaseModel):
    id: str | None = None
    shop_id: str | None = None
    product_name: str | None = None
    unit_price: float
    quantity: int = Field(ge=1)
    found: bool = False
    found_quantity: int | None = None


class AcceptOrderRequest(BaseModel):
    order_id: str
    public_order_number: str | None = None
    shop_id: str | None = None
    customer_id: str | None = None
    customer_phone: str | None = None
    shopper_id: str | None = None
    status: str = "accepted"
    order_type: str = "regular"
    reel_restaurant_id: str | None = None
    reel_user_id: str | None = None
    service_fee: float = 0.0
    delivery_fee: float = 0.0
    discount: float = Field(default=0.0, ge=0.0)
    shop_latitude: float | None = None
    shop_longitude: float | None = None
    delivery_latitude: float | None = None
    delivery_longitude: float | None = None
    created_at: str | None = None
    delivery_deadline: str | None = None
    items: list[OrderItemSnapshot]


class TransitionRequest(BaseModel):
    status: str


class ItemFoundRequest(BaseModel):
    found: bool
    found_quantity: int | None = None


class DeliveryProofRequest(BaseModel):
    reference: str


class CombineOrdersRequest(BaseModel):
    order_ids: list[str]


class ConfigureWalletRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Wallet unavailable"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str
    warnings: list[str] = []


class ItemResponse(BaseModel):
    item_id: str
    found: bool
    found_quantity: int


class GroupDeliveryResponse(BaseModel):
    customer_key: str
    delivered_order_ids: list[str]


class PriceSummaryResponse(BaseModel):
    items_total: float
    subtotal: float
    vat: float
    discount: float
    refund: float
    total: float


class BatchSummaryResponse(BaseModel):
    batch_id: str
    summary: PriceSummaryResponse
    shop_summaries: dict[str, PriceSummaryResponse]


class WalletConfigResponse(BaseModel):
    wallet: str
    should_succeed: bool
    failure_reason: str
