import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.core.constants import API_VERSION_HEADER
from src.api.core.exceptions.base import register_exception_handlers
from src.api.core.middleware.logging import logging_middleware
from src.api.router import api_router
from src.database.connection import AsyncSessionLocal, async_engine, init_db
from src.utils.settings.app import AppSettings
from src.utils.settings.auth import AuthSettings
from src.utils.logger import setup_logging

app_settings = AppSettings()
is_production = app_settings.is_production


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger = setup_logging(is_production, debug=app_settings.DEBUG)
    app_settings.validate_prod()
    logger.info("Starting KeyGate API...", environment=app_settings.ENVIRONMENT)

    await init_db(async_engine)

    app.state.session_factory = AsyncSessionLocal
    app.state.auth_settings = AuthSettings()
    if app.state.auth_settings.root_secret is None:
        logger.warning("ADMIN_API_KEY not set; admin access requires an admin key")

    yield

    # Shutdown
    logger.info("Shutting down KeyGate API...")
    await async_engine.dispose()


app = FastAPI(
    title="KeyGate API",
    description="API key issuance, validation and admin authorization",
    version=app_settings.API_VERSION,
    lifespan=lifespan,
    # Security: Disable docs in production
    docs_url=None if is_production else "/docs",
    redoc_url=None if is_production else "/redoc",
    openapi_url=None if is_production else "/openapi.json",
)

# Register global exception handlers
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[API_VERSION_HEADER, "X-Request-ID"],
)
app.middleware("http")(logging_middleware)


@app.middleware("http")
async def version_header_middleware(request, call_next):
    response = await call_next(request)
    response.headers[API_VERSION_HEADER] = app_settings.API_VERSION
    return response


app.include_router(api_router)


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=False, access_log=False
    )
