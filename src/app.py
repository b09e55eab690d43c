"""Stockroom FastAPI application.

Serves the inventory domain over HTTP. Commands are processed synchronously
and every request runs inside the inventory domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the domain.toml overlay (test, staging, production).
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from inventory.domain import inventory
from inventory.utils.logging import configure_logging, log_context

configure_logging()
inventory.init()

logger = structlog.get_logger(__name__)

_DOMAIN_PREFIXES = ("/inventory", "/orders")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Stockroom API",
    description="Inventory accounting, allocation and order fulfillment",
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
    """Push the inventory domain context and bind a request id for logging."""
    if not request.url.path.startswith(_DOMAIN_PREFIXES):
        return await call_next(request)

    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    with log_context(request_id=request_id), inventory.domain_context():
        return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from inventory.api import inventory_router, order_router, register_error_handlers  # noqa: E402

app.include_router(inventory_router)
app.include_router(order_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": inventory.name})
