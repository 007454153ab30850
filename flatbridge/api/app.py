from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flatbridge import __version__
from flatbridge.api.routes import router
from flatbridge.config import Settings, load_settings
from flatbridge.core.storage import UploadStorage
from flatbridge.exceptions import FlatBridgeError, PartialTransferError
from flatbridge.logging import get_logger

logger = get_logger(__name__)


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


async def handle_flatbridge_error(request: Request, exc: FlatBridgeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.url.path} rejected: {exc.message}")

    if isinstance(exc, PartialTransferError):
        return _error_response(
            exc.status_code,
            str(exc),
            partial=True,
            recordsProcessed=exc.records_processed,
            tableName=exc.destination,
        )
    return _error_response(exc.status_code, exc.message)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    logger.warning(f"{request.url.path} rejected: {details}")
    return _error_response(400, f"Invalid request: {details}")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.url.path} failed: {exc}", exc_info=True)
    return _error_response(500, f"Unexpected error: {exc}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application.

    The storage root is created here, once, and shared through app.state.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"flatbridge API started, storage root {app.state.storage.root}")
        yield
        logger.info("flatbridge API stopped")

    app = FastAPI(
        title="flatbridge API",
        description="Transfers between ClickHouse and delimited files",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = UploadStorage(settings.ensure_storage_root())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FlatBridgeError, handle_flatbridge_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
