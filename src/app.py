"""Shopper batching FastAPI application.

Web server that processes batch operations synchronously via HTTP. Each
request is wrapped in the batching domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay.
from batching.domain import batching  # noqa: E402
from batching.utils.logging import bind_batch_context, clear_batch_context, configure_logging  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

configure_logging()
batching.init()

_DOMAIN_PREFIXES = ("/orders", "/batches", "/wallet")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Shopper Batching API",
    description="Batch fulfillment with status transitions and item reconciliation",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the batching domain context for domain routes."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        clear_batch_context()
        bind_batch_context(path=request.url.path, method=request.method)
        with batching.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from batching.api import batch_router, order_router, wallet_router  # noqa: E402

app.include_router(order_router)
app.include_router(batch_router)
app.include_router(wallet_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domains": {"batching": {"name": batching.name}}})
