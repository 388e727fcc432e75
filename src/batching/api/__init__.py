"""Batching domain API package."""

from batching.api.routes import batch_router, order_router, wallet_router

__all__ = ["order_router", "batch_router", "wallet_router"]
