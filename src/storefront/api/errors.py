"""Exception-to-HTTP mapping for the Storefront API."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers

from storefront.payment.signer import MerchantConfigurationError

logger = structlog.get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Protean's domain exception handlers, plus 409 for write conflicts that
    outlasted the retries and 500 for merchant misconfiguration."""
    register_exception_handlers(app)

    @app.exception_handler(ExpectedVersionError)
    async def write_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
        logger.warning("Write conflict", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=409,
            content={"error": "The resource was modified concurrently, please retry"},
        )

    @app.exception_handler(MerchantConfigurationError)
    async def merchant_configuration_error(request: Request, exc: MerchantConfigurationError) -> JSONResponse:
        logger.error("Merchant configuration error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": str(exc)})
