"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from circulation.api import api_router
from circulation.config import settings
from circulation.core.exceptions import AppException
from circulation.core.logging import get_logger, setup_logging
from circulation.engine import LendingEngine

setup_logging(settings.log_level)
logger = get_logger("main")

ERROR_STATUS_CODES = {
    "NOT_FOUND": 404,
    "INVALID_STATE_TRANSITION": 409,
    "INVENTORY_EXHAUSTED": 409,
    "CONFLICT": 409,
    "WRITE_CONFLICT": 409,
    "INVALID_COUNT": 422,
    "VALIDATION_ERROR": 422,
    "STORE_UNAVAILABLE": 503,
}


def create_app(engine: Optional[LendingEngine] = None) -> FastAPI:
    """Build the application.

    With ``engine`` given the caller owns its lifecycle; otherwise one is
    built from settings at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "engine", None) is None:
            owned = await LendingEngine.from_settings(settings)
            await owned.start()
            app.state.engine = owned
        yield
        if owned is not None:
            await owned.close()
            app.state.engine = None

    app = FastAPI(
        title=settings.app_name,
        description="Library circulation API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.engine = engine

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle application exceptions."""
        return JSONResponse(
            status_code=ERROR_STATUS_CODES.get(exc.error_code, 400),
            content={
                "detail": exc.message,
                "error_code": exc.error_code,
                "details": exc.details,
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={
                    "detail": str(exc),
                    "type": type(exc).__name__,
                },
            )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": "1.0.0",
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "circulation.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
