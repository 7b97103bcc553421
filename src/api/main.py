"""
FastAPI application entry point.

Wires the chat and health routers to the solving pipeline. Expensive
resources (model manager, provider clients) are created once at startup.
"""

import logging
import os
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from .routers import chat, health
from src.models.manager import ModelManager
from src.pipeline.orchestrator.orchestrator import SolveOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

# Global application state
app_state = {}

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager: build the ModelManager and orchestrator at
    startup, release provider clients at shutdown.
    """
    config_path = Path(os.getenv("SNAPSOLVE_CONFIG", DEFAULT_CONFIG_PATH))
    logger.info(f"Starting SnapSolve API with config {config_path}")

    model_manager = ModelManager(config_path=config_path)
    app_state["model_manager"] = model_manager
    app_state["orchestrator"] = SolveOrchestrator(model_manager)
    logger.info("ModelManager initialized, API ready to accept requests")

    yield

    logger.info("Shutting down SnapSolve API")
    model_manager.cleanup()
    app_state.clear()

def create_app() -> FastAPI:
    """
    Factory function to create and configure the FastAPI application.
    """
    app = FastAPI(
        title="SnapSolve API",
        description="Step-by-step solutions for photographed or typed math problems",
        version="1.0.0",
        lifespan=lifespan
    )

    # Configure CORS middleware for frontend communication
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(chat.router, prefix="/api/v1/chats", tags=["chats"])

    @app.get("/")
    async def root():
        """Root endpoint with basic API information."""
        return {
            "name": "SnapSolve API",
            "version": "1.0.0",
            "status": "operational",
            "endpoints": {
                "health": "/health",
                "chats": "/api/v1/chats",
                "docs": "/docs",
                "redoc": "/redoc"
            }
        }

    return app

# Create the FastAPI app instance
app = create_app()
