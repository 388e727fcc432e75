"""Order intake: command and handler.

Order placement happens in the marketplace. Once a shopper accepts an order,
its snapshot (order, items, shop and customer details) is handed to this
context, which tracks fulfillment from there on.
"""

import json

import structlog
from protean import handle
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from batching.domain import batching
from batching.order.order import Order

logger = structlog.get_logger(__name__)


@batching.command(part_of="Order")
class AcceptOrder:
    """Start tracking an order a shopper has accepted."""

    order_id = Identifier(required=True)
    public_order_number = String(max_length=50)
    shop_id = Identifier()
    customer_id = Identifier()
    customer_phone = String(max_length=30)
    shopper_id = Identifier()
    status = String(max_length=20, default="accepted")
    order_type = String(max_length=20, default="regular")
    reel_restaurant_id = Identifier()
    reel_user_id = Identifier()
    service_fee = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    discount = Float(default=0.0)
    shop_latitude = Float()
    shop_longitude = Float()
    delivery_latitude = Float()
    delivery_longitude = Float()
    created_at = DateTime()
    delivery_deadline = DateTime()
    items = Text(required=True)  # JSON list of item dicts


_ORDER_FIELDS = (
    "public_order_number",
    "shop_id",
    "customer_id",
    "customer_phone",
    "shopper_id",
    "status",
    "order_type",
    "reel_restaurant_id",
    "reel_user_id",
    "service_fee",
    "delivery_fee",
    "discount",
    "shop_latitude",
    "shop_longitude",
    "delivery_latitude",
    "delivery_longitude",
    "created_at",
    "delivery_deadline",
)


@batching.command_handler(part_of=Order)
class OrderIntakeHandler:
    @handle(AcceptOrder)
    def accept_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        order_data = {name: getattr(command, name) for name in _ORDER_FIELDS if getattr(command, name) is not None}
        order = Order.accept(items_data=items_data, id=command.order_id, **order_data)
        current_domain.repository_for(Order).add(order)
        logger.info("Order accepted into batching", order_id=str(order.id), status=order.status)
        return str(order.id)
