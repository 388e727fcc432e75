"""FastAPI routes for the Batching domain."""

import json
import os

from fastapi import APIRouter, HTTPException
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from batching import engine
from batching.api.schemas import (
    AcceptOrderRequest,
    BatchSummaryResponse,
    CombineOrdersRequest,
    ConfigureWalletRequest,
    DeliveryProofRequest,
    GroupDeliveryResponse,
    ItemFoundRequest,
    ItemResponse,
    OrderIdResponse,
    OrderStatusResponse,
    PriceSummaryResponse,
    TransitionRequest,
    WalletConfigResponse,
)
from batching.errors import LedgerError
from batching.order import pricing
from batching.order.intake import AcceptOrder
from batching.wallet import get_wallet
from batching.wallet.fake_adapter import FakeWallet


def _unwrap(result):
    """Return the result value or raise the matching HTTP error."""
    if result.ok:
        return result.value
    status_code = 422 if isinstance(result.error, LedgerError) else 409
    raise HTTPException(
        status_code=status_code,
        detail={"error": type(result.error).__name__, "message": result.error.message},
    )


def _load_batch(batch_id: str):
    try:
        return engine.load_batch(batch_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Batch {batch_id} not found") from None


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def accept_order(body: AcceptOrderRequest) -> OrderIdResponse:
    """Start tracking an order a shopper has accepted."""
    fields = body.model_dump(exclude={"items"}, exclude_none=True)
    command = AcceptOrder(
        items=json.dumps([item.model_dump(exclude_none=True) for item in body.items]),
        **fields,
    )
    try:
        result = current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.messages) from None
    return OrderIdResponse(order_id=result)


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def request_transition(order_id: str, body: TransitionRequest) -> OrderStatusResponse:
    """Move an order to the next fulfillment status."""
    try:
        result = engine.request_transition(order_id, body.status)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found") from None
    order = _unwrap(result)
    return OrderStatusResponse(order_id=str(order.id), status=order.status, warnings=result.warnings)


@order_router.put("/{order_id}/items/{item_id}/found", response_model=ItemResponse)
async def set_item_found(order_id: str, item_id: str, body: ItemFoundRequest) -> ItemResponse:
    """Mark an item as found (optionally partially) or unavailable."""
    try:
        result = engine.set_item_found(order_id, item_id, body.found, body.found_quantity)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found") from None
    item = _unwrap(result)
    return ItemResponse(item_id=str(item.id), found=item.found, found_quantity=item.found_quantity)


@order_router.put("/{order_id}/proof", response_model=OrderStatusResponse)
async def attach_delivery_proof(order_id: str, body: DeliveryProofRequest) -> OrderStatusResponse:
    """Record the proof-of-delivery reference produced by the upload service."""
    try:
        result = engine.attach_delivery_proof(order_id, body.reference)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found") from None
    order = _unwrap(result)
    return OrderStatusResponse(order_id=str(order.id), status=order.status)


# ---------------------------------------------------------------------------
# Batch Router
# ---------------------------------------------------------------------------
batch_router = APIRouter(prefix="/batches", tags=["batches"])


@batch_router.get("/{batch_id}")
async def describe_batch(batch_id: str, lat: float | None = None, lng: float | None = None) -> dict:
    """Active-batch read model: urgency, groups, progress and totals."""
    batch = _load_batch(batch_id)
    return engine.describe_batch(batch, latitude=lat, longitude=lng)


@batch_router.put("/{batch_id}/orders")
async def combine_orders(batch_id: str, body: CombineOrdersRequest) -> dict:
    """Combine more orders into a batch."""
    _load_batch(batch_id)
    try:
        result = engine.combine_orders(batch_id, body.order_ids)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    batch = _unwrap(result)
    return {"batch_id": batch.id, "order_ids": [str(order.id) for order in batch.orders]}


@batch_router.get("/{batch_id}/summary", response_model=BatchSummaryResponse)
async def batch_summary(batch_id: str) -> BatchSummaryResponse:
    """Reconciled charge for the batch, plus per-shop totals."""
    batch = _load_batch(batch_id)
    return BatchSummaryResponse(
        batch_id=batch.id,
        summary=PriceSummaryResponse(**engine.compute_batch_summary(batch).to_dict()),
        shop_summaries={
            shop_id: PriceSummaryResponse(**summary.to_dict())
            for shop_id, summary in pricing.shop_summaries(batch).items()
        },
    )


@batch_router.post("/{batch_id}/customers/{customer_key}/deliver", response_model=GroupDeliveryResponse)
async def confirm_group_delivery(batch_id: str, customer_key: str) -> GroupDeliveryResponse:
    """Deliver every order of one customer together."""
    _load_batch(batch_id)
    orders = _unwrap(engine.confirm_group_delivery(batch_id, customer_key))
    return GroupDeliveryResponse(
        customer_key=customer_key,
        delivered_order_ids=[str(order.id) for order in orders],
    )


# ---------------------------------------------------------------------------
# Wallet Router
# ---------------------------------------------------------------------------
wallet_router = APIRouter(prefix="/wallet", tags=["wallet"])


@wallet_router.post("/configure", response_model=WalletConfigResponse)
async def configure_wallet(body: ConfigureWalletRequest) -> WalletConfigResponse:
    """Configure the FakeWallet behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Wallet configuration not available in production")

    wallet = get_wallet()
    if not isinstance(wallet, FakeWallet):
        raise HTTPException(status_code=400, detail="Wallet configuration only available for FakeWallet")

    wallet.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
    )
    return WalletConfigResponse(
        wallet=type(wallet).__name__,
        should_succeed=wallet.should_succeed,
        failure_reason=wallet.failure_reason,
    )
