"""Exception handlers translating ordering failures into `{"error": ...}` responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import OrderingError
from payments.gateway.port import GatewayConfigurationError

logger = structlog.get_logger(__name__)


async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_rejected",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=exc.message,
        **{key: str(value) for key, value in exc.context.items()},
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_invalid", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid order data"})


async def gateway_configuration_error_handler(request: Request, exc: GatewayConfigurationError) -> JSONResponse:
    logger.error("payment_configuration_missing", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers plus the ordering-specific ones."""
    register_exception_handlers(app)
    app.add_exception_handler(OrderingError, ordering_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(GatewayConfigurationError, gateway_configuration_error_handler)
