"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from farm_market.config import settings
from farm_market.middleware.error_handler import ErrorHandlerMiddleware
from farm_market.api.v1.routers import (
    care_logs,
    carts,
    custom_node_types,
    farm_layouts,
    orders,
    prebookings,
    tree_positions,
    trees,
    vegetables,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
    enabled=settings.rate_limit_enabled,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Closes the shared database client on shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Database: {settings.database_url} (timeout {settings.database_timeout}s, "
                f"{settings.max_retry_attempts} attempts)")
    logger.info(f"Grid: block size {settings.block_size}, guide step {settings.planting_guide_step}")
    if settings.rate_limit_enabled:
        logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    from farm_market.infrastructure.database_client import get_database_client
    logger.info("Shutting down application...")
    client = get_database_client()
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    description="""
    Farm marketplace and orchard planning API

    ## Features

    - **Farm layouts**: Grids of blocks that can grow in any direction
    - **Tree placement**: Plant, move and geotag trees on layout cells,
      one tree per cell
    - **Size tiers**: Each cell gets a tree size tier from its position in
      the block, which farmers can override per cell
    - **Listings**: Sellers list produce with a price and stock; buyers browse
    - **Carts and orders**: Single-seller carts with stock limits and a
      one-free-item-per-kind rule
    - **Prebookings**: Reserve out-of-stock vegetables, one open request
      per vegetable and seller
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(farm_layouts.router, prefix="/api/v1")
app.include_router(trees.router, prefix="/api/v1")
app.include_router(tree_positions.router, prefix="/api/v1")
app.include_router(custom_node_types.router, prefix="/api/v1")
app.include_router(care_logs.router, prefix="/api/v1")
app.include_router(vegetables.router, prefix="/api/v1")
app.include_router(carts.router, prefix="/api/v1")
app.include_router(prebookings.router, prefix="/api/v1")
app.include_router(orders.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
