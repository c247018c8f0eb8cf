"""
Main FastAPI application for the GPU Sizer API.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings, settings as default_settings
from .health import router as health_router
from .routers import sizing


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="GPU Sizer API",
        description="Recommend GPUs or NVLink groups for model inference workloads",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
    )

    app.include_router(sizing.router)
    app.include_router(health_router, prefix="/api", tags=["health"])

    @app.get("/")
    async def root():
        """Root endpoint returning API information."""
        return {
            "name": "GPU Sizer API",
            "version": __version__,
            "docs": "/docs",
        }

    return app


app = create_app()
