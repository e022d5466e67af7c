"""Giving ledger HTTP API.

Serves the operator dashboard: record donations, review what is owed,
settle payouts, browse payout history and reconcile the ledger. Every
request runs inside the giving domain's context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

import uuid

# PROTEAN_ENV picks the domain.toml overlay:
#   - "test" / unset -> in-memory provider, projector runs in the UoW
#   - "production"   -> PostgreSQL, projector runs in the Engine (server.py)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from giving.domain import giving
from giving.utils.logging import bind_request_context, clear_request_context, configure_logging
from protean.integrations.fastapi import register_exception_handlers

configure_logging()
giving.init()

app = FastAPI(
    title="Giving Ledger API",
    description="Donation settlement and nonprofit payouts",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the giving domain context and tag log lines with a request id."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    bind_request_context(request_id=request_id, path=request.url.path)
    try:
        with giving.domain_context():
            response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from giving.api import donation_router, payout_router  # noqa: E402

app.include_router(donation_router)
app.include_router(payout_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": giving.name})
