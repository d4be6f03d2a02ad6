from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from serenity.api.errors import register_exception_handlers
from serenity.api.router import api_router
from serenity.api.routers.health import router as health_router
from serenity.core.logging import configure_logging
from serenity.core.settings import get_settings
from serenity.dependency_injection import build_container, close_container

settings = get_settings()
configure_logging(settings.effective_log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "starting serenity backend",
        extra={"app_env": settings.app_env, "canned_responder": settings.use_canned_responder},
    )
    container = build_container(settings)
    app.state.settings = settings
    app.state.container = container

    try:
        yield
    finally:
        await close_container(container)
        logger.info("serenity backend shutdown complete")


app = FastAPI(
    title="Serenity Backend",
    version="0.1.0",
    docs_url="/docs" if settings.enable_swagger else None,
    redoc_url="/redoc" if settings.enable_swagger else None,
    openapi_url="/openapi.json" if settings.enable_swagger else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api")
