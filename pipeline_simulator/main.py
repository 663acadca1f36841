"""
FastAPI application entry point
"""

import logging
from contextlib import asynccontextmanager

# Configure application logging (uvicorn only sets up its own loggers)
logging.basicConfig(
    level=logging.INFO, format="%(levelname)s:\t %(name)s - %(message)s"
)
logger = logging.getLogger(__name__)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routers import deployments, simulator
from .services.simulation_engine import get_simulation_engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    if settings.step_duration_scale != 1.0:
        logger.info(f"Step durations scaled by {settings.step_duration_scale}")

    yield

    # Shutdown - stop simulations still in flight so their records are finalized
    logger.debug("Shutting down (lifespan)...")
    engine = app.dependency_overrides.get(get_simulation_engine, get_simulation_engine)()
    await engine.shutdown()


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Simulates multi-step deployment pipelines with live progress and logs.",
        lifespan=lifespan,
    )

    # CORS middleware (for local development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(simulator.router)
    app.include_router(deployments.router)

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
        }

    return app


app = create_app()


def main():
    """CLI entry point"""
    import argparse
    import os

    import uvicorn

    parser = argparse.ArgumentParser(description="Deployment pipeline simulator")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port})",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})",
    )
    parser.add_argument(
        "--step-scale",
        type=float,
        default=None,
        help="Multiply every step duration by this factor (0 = no waiting)",
    )
    parser.add_argument(
        "--deployments-file",
        type=str,
        default=None,
        help="Persist deployment records to this JSON file",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        default=settings.debug,
        help="Enable auto-reload (for development)",
    )
    args = parser.parse_args()

    # Picked up when uvicorn imports the app
    if args.step_scale is not None:
        os.environ["PSIM_STEP_DURATION_SCALE"] = str(args.step_scale)
    if args.deployments_file:
        os.environ["PSIM_DEPLOYMENTS_FILE"] = args.deployments_file

    uvicorn.run(
        "pipeline_simulator.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
