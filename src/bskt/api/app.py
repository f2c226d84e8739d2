"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bskt import __version__
from bskt.config import get_settings
from bskt.errors import (
    BsktError,
    ConflictError,
    NotFoundError,
    POREligibilityError,
    SubmissionError,
    ValidationError,
)
from bskt.services.container import Services, build_services
from bskt.utils.locks import LockTimeoutError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def _error(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    body = {"success": False, "error": code, "message": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=body)


def error_status(exc: BsktError) -> int:
    """HTTP status for a domain error."""
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (ValidationError, ConflictError, POREligibilityError, SubmissionError)):
        return 400
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain and request errors onto the JSON error envelope."""

    @app.exception_handler(BsktError)
    async def domain_error(request: Request, exc: BsktError) -> JSONResponse:
        extra = {}
        if isinstance(exc, ValidationError):
            extra["field"] = exc.field
        if isinstance(exc, POREligibilityError):
            extra.update(reason=exc.reason, mint_id=exc.mint_id)
        if isinstance(exc, SubmissionError):
            extra.update(asset_id=exc.asset_id, mint_id=exc.mint_id)
        return _error(error_status(exc), exc.code, exc.message, **extra)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = ", ".join(
            f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
            for err in exc.errors()
        )
        return _error(400, ValidationError.code, message)

    @app.exception_handler(LockTimeoutError)
    async def lock_timeout(request: Request, exc: LockTimeoutError) -> JSONResponse:
        return _error(409, "LOCK_TIMEOUT", str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        return _error(exc.status_code, code, str(exc.detail))


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Prebuilt service graph (built from settings when omitted)
    """
    if services is None:
        services = build_services(get_settings())
    settings = services.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        await services.start()
        yield
        # Shutdown
        await services.stop()

    app = FastAPI(
        title="Basket Registry API",
        description="Chain, asset and basket registries with POR-gated minting",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug or not settings.is_production else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register routes
    from bskt.api.routers import (
        assets,
        baskets,
        chains,
        mints,
        multichain_assets,
        multichain_baskets,
        multichain_mints,
    )
    from bskt.api.routes import health

    app.include_router(health.router, tags=["Health"])
    app.include_router(chains.router)
    app.include_router(assets.router)
    app.include_router(baskets.router)
    app.include_router(mints.router)
    app.include_router(multichain_assets.router)
    app.include_router(multichain_baskets.router)
    app.include_router(multichain_mints.router)

    return app
