"""Batching bounded context: Shopper Batch Fulfillment.

Tracks a delivery worker's batch of orders from acceptance through shopping
and delivery: item found/not-found reconciliation, pricing recomputation,
customer and shop grouping, and dispatch urgency. Uses CQRS; the order
snapshots are owned by the marketplace and only their fulfillment state is
mutated here.
"""

import structlog
from protean.domain import Domain

batching = Domain(name="batching")

logger = structlog.get_logger(__name__)
