"""Map fulfillment errors onto HTTP responses.

Protean's own exceptions (ValidationError, ObjectNotFoundError, ...) are
handled by ``protean.integrations.fastapi.register_exception_handlers``; this
adds the fulfillment error taxonomy alongside them with the same body shape.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fulfillment.shared.errors import FulfillmentError

logger = structlog.get_logger(__name__)


async def _fulfillment_error_handler(request: Request, exc: FulfillmentError) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.messages})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FulfillmentError, _fulfillment_error_handler)
