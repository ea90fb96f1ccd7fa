# expense_tracker/main.py
import uvicorn
import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from expense_tracker.api.api import api_router
from expense_tracker.api.routes import pages
from expense_tracker.core.config import Settings, get_settings
from expense_tracker.core.context import AppContext
from expense_tracker.core.errors import AppError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        name = ".".join(loc) or "body"
        if error.get("type") == "missing":
            fields.append(f"{name} is required")
        else:
            fields.append(f"{name}: {error.get('msg')}")
    return "; ".join(fields) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        context = AppContext(settings)
        app.state.context = context
        try:
            await context.startup()
            logger.info(f"✅ {settings.APP_NAME} started ({settings.ENVIRONMENT})")
            yield
        finally:
            await context.shutdown()
            logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Authentication", "description": "Registration, login and logout"},
            {"name": "expenses", "description": "Expenses of the signed-in user"},
            {"name": "categories", "description": "Reference categories"},
        ],
    )

    # CORS Configuration
    origins = [
        settings.FRONTEND_URL,
        "http://localhost:3000",  # Local development
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _describe_validation_error(exc)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # ------------------------------------------------------------
    # ROOT ENDPOINT
    # ------------------------------------------------------------
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information"""
        return {
            "message": f"{settings.APP_NAME} is running!",
            "version": settings.VERSION,
        }

    # ------------------------------------------------------------
    # HEALTH CHECK ENDPOINT
    # ------------------------------------------------------------
    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint"""
        if not await request.app.state.context.database.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "detail": "Database unavailable"},
            )
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
        }

    # ------------------------------------------------------------
    # BUSINESS LOGIC ROUTES
    # ------------------------------------------------------------
    app.include_router(api_router, prefix="/api")
    app.include_router(pages.router)

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("expense_tracker.main:create_app", factory=True, host="0.0.0.0", port=port, reload=False)
