"""MealStream FastAPI application.

Web server that processes fulfillment commands synchronously via HTTP.
Each request runs inside the fulfillment domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fulfillment.domain import fulfillment  # noqa: E402
from protean.integrations.fastapi import register_exception_handlers

fulfillment.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="MealStream API",
    description="Meal delivery fulfillment — orders, deliveries, drivers and routes",
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
    """Push the fulfillment domain context for each request."""
    with fulfillment.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from fulfillment.api.errors import register_error_handlers  # noqa: E402
from fulfillment.api.routes import (  # noqa: E402
    delivery_router,
    driver_router,
    order_router,
    route_router,
    zone_router,
)

app.include_router(order_router)
app.include_router(delivery_router)
app.include_router(driver_router)
app.include_router(zone_router)
app.include_router(route_router)

register_exception_handlers(app)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"fulfillment": {"name": fulfillment.name}},
        }
    )
