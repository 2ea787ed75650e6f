import logging.config
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional

from textkit.api.api import api_router
from textkit.core.config import settings, log_settings
from textkit.services.tool_service import ToolService

from textkit.dependencies import (
    get_tool_service,
    set_tool_service_instance,
)

# Configure logging based on settings
logging.config.dictConfig({
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "level": settings.log_level.upper(), # Use settings log level
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "": { # Root logger
            "handlers": ["console"],
            "level": settings.log_level.upper(),
            "propagate": False,
        },
        "textkit": { # Logger for the 'textkit' namespace
            "handlers": ["console"],
            "level": settings.log_level.upper(),
            "propagate": False,
        },
        "uvicorn.error": {
            "handlers": ["console"],
            "level": "INFO", # Keep uvicorn loggers at INFO
            "propagate": False,
        },
        "uvicorn.access": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
})

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.
    Creates the log directory and the ToolService singleton on startup and
    releases it on shutdown.
    """
    logger.info("Starting application lifespan...")
    log_settings(settings)

    log_dir = settings.calculated_log_dir_path
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Logging initialized. Log level: {settings.log_level.upper()}, Log directory: {log_dir}")

    tool_service_local: Optional[ToolService] = None
    try:
        tool_service_local = ToolService() # No arguments needed; will use settings
        set_tool_service_instance(tool_service_local) # Store instance for DI
        app.dependency_overrides[get_tool_service] = get_tool_service
        logger.info(f"Application startup completed. API: {settings.api_v1_prefix}")
    except Exception as e:
        logger.critical(f"Fatal error during application startup: {e}", exc_info=True)
        set_tool_service_instance(None)
        raise # Re-raise to stop the application

    yield

    logger.info("Application shutdown initiated...")
    set_tool_service_instance(None)
    logger.info("Application shutdown complete.")

# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url=f"{settings.api_v1_prefix}/docs",
    redoc_url=f"{settings.api_v1_prefix}/redoc",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_v1_prefix)

@app.get("/")
async def read_root():
    return {
        "status": "active",
        "message": f"{settings.api_title} v{settings.api_version} is running",
        "api_docs_url": f"{settings.api_v1_prefix}/docs"
    }

# --- Main execution block (for direct execution with Python) ---
def run():
    import uvicorn
    import argparse

    parser = argparse.ArgumentParser(description=settings.api_description)
    parser.add_argument("--host", default="127.0.0.1", help="Server host (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Server port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload (development only)")
    args = parser.parse_args()

    if settings.environment != "production":
        logger.warning("Running directly with uvicorn in development mode.")

    uvicorn.run("textkit.main:app", host=args.host, port=args.port, reload=args.reload, log_config=None)

if __name__ == "__main__":
    run()
