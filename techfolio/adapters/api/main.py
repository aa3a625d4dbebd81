# techfolio/adapters/api/main.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from techfolio import __version__
from techfolio.core.domain.exceptions import DomainError
from techfolio.shared.config import settings, AppEnv
from techfolio.shared.container import container
from techfolio.shared.logging_config import configure_logging
from techfolio.shared.observability import setup_observability

# Import Routers
# Note: We import the modules directly to ensure 'container.wire' works correctly
from techfolio.adapters.api.routers import health
from techfolio.adapters.api.routes import router as api_router

logger = structlog.get_logger()

# Domain error code -> HTTP status
ERROR_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid_operation": status.HTTP_409_CONFLICT,
    "validation_error": 422,
    "permission_denied": status.HTTP_403_FORBIDDEN,
}

WIRED_MODULES = [
    "techfolio.adapters.api.dependencies",
    "techfolio.adapters.api.routers.health",
]

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application Lifecycle Manager.
    Startup logs the effective configuration; shutdown releases the container's singletons.
    """
    logger.info(
        "app_startup",
        env=settings.APP_ENV.value,
        storage=settings.STORAGE_BACKEND.value,
        delete_policy=settings.CATEGORY_DELETE_POLICY,
    )

    yield

    logger.info("app_shutdown")
    container.shutdown_resources()

def error_body(code: str, message: str) -> dict:
    return {"status": "error", "code": code, "message": message}

def create_app() -> FastAPI:
    """Factory function to create the FastAPI application."""

    configure_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=__version__,
        description="Technical content backend: category tree, articles, projects and certificates",
        docs_url="/docs" if settings.APP_ENV != AppEnv.PRODUCTION else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # 1. Wire the Container
    # We must explicitly tell the container which modules use the @inject decorator.
    container.wire(modules=WIRED_MODULES)

    # 2. CORS Configuration
    origins = ["*"] if settings.DEBUG else []
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 3. Tracing
    setup_observability(app)

    # 4. Global Exception Handlers
    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        """Maps domain error kinds onto HTTP statuses."""
        status_code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
        logger.info(
            "domain_error",
            path=request.url.path,
            code=exc.code,
            status_code=status_code,
            message=exc.message,
        )
        return JSONResponse(status_code=status_code, content=error_body(exc.code, exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Standardizes HTTP errors (unknown routes, bad role header).
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.status_code), str(exc.detail)),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catches unhandled exceptions to prevent leaking stack traces in Prod.
        """
        logger.exception("unhandled_exception", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("internal_error", str(exc) if settings.DEBUG else "Internal Server Error"),
        )

    # 5. Mount Routes
    app.include_router(health.router)
    app.include_router(api_router, prefix="/api/v1")

    return app

def run() -> None:
    """Console entry point (`techfolio-api`)."""
    import uvicorn
    uvicorn.run(
        "techfolio.adapters.api.main:create_app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        factory=True,
    )

# Entry point for local debugging (e.g. `python -m techfolio.adapters.api.main`)
if __name__ == "__main__":
    run()
