"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from label_score.api.bills import router as bills_router
from label_score.api.products import router as products_router
from label_score.api.profiles import router as profiles_router
from label_score.app_logging import configure_logging
from label_score.containers import AppContainer
from label_score.services.products import ProductLookupError, SearchQueryError
from label_score.services.profiles import ProfileNotFoundError
from label_score.services.receipts import ReceiptExtractionError, ReceiptModelError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Label Score", lifespan=lifespan)
    app.state.container = container

    app.include_router(products_router)
    app.include_router(profiles_router)
    app.include_router(bills_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(ProfileNotFoundError)
    async def profile_not_found(
        request: Request, exc: ProfileNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Profile not found"},
        )

    @app.exception_handler(ProductLookupError)
    async def product_lookup_failed(
        request: Request, exc: ProductLookupError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": _error_detail(container, exc, "Product lookup failed")},
        )

    @app.exception_handler(ReceiptModelError)
    async def receipt_reader_failed(
        request: Request, exc: ReceiptModelError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": _error_detail(container, exc, "Receipt reader failed")},
        )

    @app.exception_handler(ReceiptExtractionError)
    async def receipt_unreadable(
        request: Request, exc: ReceiptExtractionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": "Receipt could not be read"},
        )

    @app.exception_handler(SearchQueryError)
    async def invalid_query(request: Request, exc: SearchQueryError) -> JSONResponse:
        logger.info("Rejected request %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    return app


def _error_detail(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a client-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
