"""Order aggregate (CQRS): a shop-scoped order inside a shopper's batch.

The aggregate owns the canonical fulfillment status and the found state of
its items. A batch is not stored separately: it is a primary order plus the
orders whose ``combined_with`` points at it.

State Machine:
    ACCEPTED → SHOPPING → ON_THE_WAY → AT_CUSTOMER → DELIVERED
    ACCEPTED → {PICKED, ON_THE_WAY}  (restaurant and restaurant/user reel orders)
    PICKED → ON_THE_WAY
    ON_THE_WAY → DELIVERED

Entering ON_THE_WAY for the first time requests the service and delivery fee
credits; ``fees_credited`` keeps that to once per order.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from batching.domain import batching
from batching.errors import (
    IncompleteShoppingError,
    LedgerError,
    MissingProofError,
    TerminalStateError,
    TransitionError,
)
from batching.grouping import customer_key
from batching.order import ledger, pricing
from batching.order.events import (
    DeliveryProofAttached,
    ItemFoundStatusUpdated,
    OrderAccepted,
    OrderCombined,
    OrderDelivered,
    OrderStatusChanged,
    ShoppingCompleted,
    WalletCreditRequested,
)
from batching.order.status import (
    HANDOVER_STATUSES,
    FeeKind,
    OrderStatus,
    OrderType,
    allowed_targets,
    assert_can_transition,
    parse_status,
)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@batching.entity(part_of="Order")
class OrderItem:
    """A requested line item and what the shopper actually found."""

    shop_id = Identifier()
    product_name = String(max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    found = Boolean(default=False)
    found_quantity = Integer(default=0, min_value=0)
    resolved = Boolean(default=False)

    @invariant.post
    def found_quantity_must_fit_request(self):
        if self.found_quantity is not None and self.found_quantity > self.quantity:
            raise ValidationError({"found_quantity": ["Found quantity cannot exceed requested quantity"]})
        if self.found and not self.found_quantity:
            raise ValidationError({"found_quantity": ["A found item needs at least one unit"]})


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@batching.aggregate
class Order:
    public_order_number = String(max_length=50)
    shop_id = Identifier()
    customer_id = Identifier()
    customer_phone = String(max_length=30)
    shopper_id = Identifier()
    status = String(choices=OrderStatus, default=OrderStatus.ACCEPTED.value)
    order_type = String(choices=OrderType, default=OrderType.REGULAR.value)
    reel_restaurant_id = Identifier()
    reel_user_id = Identifier()
    service_fee = Float(default=0.0, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    combined_with = Identifier()
    proof_of_delivery = String(max_length=500)
    fees_credited = Boolean(default=False)
    shop_latitude = Float()
    shop_longitude = Float()
    delivery_latitude = Float()
    delivery_longitude = Float()
    items = HasMany(OrderItem)
    created_at = DateTime()
    delivery_deadline = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def accept(cls, items_data: list[dict] | None = None, **order_data):
        """Take in an order snapshot from the marketplace."""
        now = datetime.now(UTC)
        order_data.setdefault("created_at", now)
        order = cls(updated_at=now, **order_data)
        for item_data in items_data or []:
            item_data = dict(item_data)
            item_data.setdefault("shop_id", order.shop_id)
            if item_data.get("found") and not item_data.get("found_quantity"):
                item_data["found_quantity"] = item_data["quantity"]
            if item_data.get("found"):
                item_data.setdefault("resolved", True)
            order.add_items(OrderItem(**item_data))

        order.raise_(
            OrderAccepted(
                order_id=str(order.id),
                shopper_id=order.shopper_id,
                shop_id=order.shop_id,
                order_type=order.order_type,
                status=order.status,
                item_count=len(items_data or []),
                accepted_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def skips_shopping(self) -> bool:
        """Prepared orders (restaurant meals, restaurant/user reels) have no shopping phase."""
        order_type = OrderType(self.order_type)
        if order_type == OrderType.RESTAURANT:
            return True
        return order_type == OrderType.REEL and bool(self.reel_restaurant_id or self.reel_user_id)

    @property
    def customer_key(self) -> str:
        return customer_key(self)

    @property
    def has_delivery_proof(self) -> bool:
        return bool(self.proof_of_delivery)

    @property
    def ready_for_handover(self) -> bool:
        return OrderStatus(self.status) in HANDOVER_STATUSES and self.has_delivery_proof

    def allowed_transitions(self) -> frozenset:
        return allowed_targets(OrderStatus(self.status), self.skips_shopping)

    def get_item(self, item_id):
        return next((i for i in (self.items or []) if str(i.id) == str(item_id)), None)

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def transition_to(self, target) -> list[dict]:
        """Move to ``target`` and return the fee credits this step made payable.

        Requesting the current status again is treated as a retry and does
        nothing. A delivered order rejects every request.
        """
        current = OrderStatus(self.status)
        if current == OrderStatus.DELIVERED:
            requested = getattr(target, "value", target)
            raise TerminalStateError(
                f"Order is already delivered; cannot move to {requested}",
                from_status=current.value,
                to_status=str(requested),
            )
        target = parse_status(target)

        if target == current:
            return []

        assert_can_transition(current, target, self.skips_shopping)
        self._check_guards(current, target)

        now = datetime.now(UTC)
        if current == OrderStatus.SHOPPING:
            summary = pricing.order_summary(self)
            self.raise_(
                ShoppingCompleted(
                    order_id=str(self.id),
                    items_total=summary.items_total,
                    refund=summary.refund,
                    final_total=summary.total,
                    completed_at=now,
                )
            )

        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                from_status=current.value,
                to_status=target.value,
                changed_at=now,
            )
        )

        credits = []
        if target == OrderStatus.ON_THE_WAY and not self.fees_credited:
            credits = self._request_fee_credits(now)

        if target == OrderStatus.DELIVERED:
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    customer_key=self.customer_key,
                    delivered_at=now,
                )
            )
        return credits

    def _check_guards(self, current: OrderStatus, target: OrderStatus) -> None:
        if current == OrderStatus.SHOPPING and OrderType(self.order_type) == OrderType.REGULAR:
            if not any(item.resolved for item in (self.items or [])):
                raise IncompleteShoppingError(
                    "Mark at least one item as found or unavailable before leaving shopping",
                    order_id=str(self.id),
                )
        if current == OrderStatus.AT_CUSTOMER and target == OrderStatus.DELIVERED:
            if not self.has_delivery_proof:
                raise MissingProofError(
                    "Proof of delivery is required before confirming delivery",
                    order_id=str(self.id),
                )

    def _request_fee_credits(self, now: datetime) -> list[dict]:
        credits = []
        for kind, amount in ((FeeKind.SERVICE_FEE, self.service_fee), (FeeKind.DELIVERY_FEE, self.delivery_fee)):
            if not amount:
                continue
            credit = {
                "order_id": str(self.id),
                "shopper_id": self.shopper_id,
                "amount": amount,
                "kind": kind.value,
            }
            credits.append(credit)
            self.raise_(WalletCreditRequested(requested_at=now, **credit))
        self.fees_credited = True
        return credits

    # -------------------------------------------------------------------
    # Item ledger
    # -------------------------------------------------------------------
    def mark_item_found(self, item_id, found: bool, found_quantity: int | None = None):
        """Record whether an item was found, and how many units."""
        if OrderStatus(self.status) != OrderStatus.SHOPPING:
            raise LedgerError(
                f"Items can only be updated while shopping; order is {self.status}",
                order_id=str(self.id),
            )

        item = self.get_item(item_id)
        if item is None:
            raise LedgerError("Item not found in this order", item_id=str(item_id))

        quantity = ledger.resolve_found_quantity(item.quantity, found, found_quantity)

        # Field order keeps the item invariant true after each assignment
        if found:
            item.found_quantity = quantity
            item.found = True
        else:
            item.found = False
            item.found_quantity = 0
        item.resolved = True

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ItemFoundStatusUpdated(
                order_id=str(self.id),
                item_id=str(item.id),
                found=found,
                found_quantity=quantity,
                updated_at=now,
            )
        )
        return item

    # -------------------------------------------------------------------
    # Delivery proof and batching
    # -------------------------------------------------------------------
    def attach_delivery_proof(self, reference: str) -> None:
        if not reference:
            raise MissingProofError("Proof of delivery reference cannot be empty", order_id=str(self.id))
        if OrderStatus(self.status) not in HANDOVER_STATUSES:
            raise TransitionError(
                f"Proof of delivery can only be attached on the way or at the customer; order is {self.status}",
                order_id=str(self.id),
            )

        now = datetime.now(UTC)
        self.proof_of_delivery = reference
        self.updated_at = now
        self.raise_(
            DeliveryProofAttached(
                order_id=str(self.id),
                reference=reference,
                attached_at=now,
            )
        )

    def combine_into(self, primary_order_id: str) -> None:
        now = datetime.now(UTC)
        self.combined_with = primary_order_id
        self.updated_at = now
        self.raise_(
            OrderCombined(
                order_id=str(self.id),
                primary_order_id=primary_order_id,
                combined_at=now,
            )
        )
