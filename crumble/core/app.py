"""
FastAPI Application Factory
Creates the app and wires the addon aggregation components
"""
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from crumble.api.endpoints import addons, catalog, content, health, manifest, mdblist
from crumble.core.config import AddonSeed, settings
from crumble.services.addons import AddonManager
from crumble.services.aggregator import AddonAggregator
from crumble.services.cache import AddonCache
from crumble.services.fallback import FallbackProvider
from crumble.services.loader import AddonLoader
from crumble.services.normalizer import ResponseNormalizer
from crumble.services.registry import AddonRegistry
from crumble.services.transport import AddonTransport
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def build_components(
    app: FastAPI,
    transport: Optional[AddonTransport] = None,
    cache: Optional[AddonCache] = None,
    seeds: Optional[List[AddonSeed]] = None,
):
    """Composition root: one instance of each component, stored on app.state"""
    cache = cache or AddonCache()
    transport = transport or AddonTransport()
    registry = AddonRegistry(cache)
    loader = AddonLoader(registry, transport)
    aggregator = AddonAggregator(registry, cache, transport)
    fallback = FallbackProvider()

    app.state.cache = cache
    app.state.transport = transport
    app.state.registry = registry
    app.state.loader = loader
    app.state.aggregator = aggregator
    app.state.fallback = fallback
    app.state.normalizer = ResponseNormalizer(aggregator, fallback)
    app.state.manager = AddonManager(
        registry, loader, cache, settings.ADDONS if seeds is None else seeds
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    # Startup
    logger.info("Starting CRUMBLE BFF")
    logger.info(f"Base URL: {settings.BASE_URL}")

    await app.state.manager.initialize()

    yield

    # Shutdown
    logger.info("Shutting down CRUMBLE BFF")
    await app.state.transport.close()


def create_app(
    transport: Optional[AddonTransport] = None,
    cache: Optional[AddonCache] = None,
    seeds: Optional[List[AddonSeed]] = None,
) -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="CRUMBLE BFF",
        description="Aggregates Stremio addons, MDbList and fallback content for the CRUMBLE frontend",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    build_components(app, transport=transport, cache=cache, seeds=seeds)

    # Include routers
    app.include_router(health.router)
    app.include_router(addons.router)
    app.include_router(manifest.router)
    app.include_router(content.router)
    app.include_router(mdblist.router)
    app.include_router(catalog.router)

    return app
