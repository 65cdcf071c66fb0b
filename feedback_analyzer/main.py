"""
Feedback Analyzer - Main Application
====================================

Feedback aggregation, classification and quota-gated AI enrichment.

Modules:
- Quota: Metered resource budgets (AI tokens, store and cache operations)
- Feedback: Summary, insights and network visualization views

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Aggregator, enrichment adapter and DTOs
- Domain: Entities, classifier and layer health scorer
- Infrastructure: Database, cache and AI gateways
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration
from feedback_analyzer.config import ResourceClass, settings

# Infrastructure
from feedback_analyzer.infrastructure.database import (
    init_database, close_database, create_tables, get_session_maker
)

# Quota Module
from feedback_analyzer.quota.application import QuotaTracker
from feedback_analyzer.quota.infrastructure import YAMLQuotaConfigProvider

# Feedback Module
from feedback_analyzer.feedback.application import FeedbackAggregator, AIEnrichmentAdapter
from feedback_analyzer.feedback.infrastructure import (
    SQLAlchemyFeedbackRepository,
    SQLAlchemyCacheGateway,
    InMemoryCacheGateway,
    build_ai_gateway,
)
from feedback_analyzer.feedback.interfaces import feedback_router

# Shared
from feedback_analyzer.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    global_exception_handler
)
from feedback_analyzer.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load quota limits and create the quota tracker
    3. Initialize database and create tables
    4. Build cache and AI gateways
    5. Build the aggregator

    SHUTDOWN:
    1. Close AI gateway
    2. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Feedback Analyzer", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Loading quota configuration")
    quota_config = YAMLQuotaConfigProvider(settings.quota_config_path).get_config()
    quota_tracker = QuotaTracker(quota_config)

    logger.info("Initializing database")
    init_database()
    # The service starts without a database; reads fall back to the seed dataset
    try:
        await create_tables()
    except Exception as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    session_maker = get_session_maker()
    repository = SQLAlchemyFeedbackRepository(session_maker)
    if settings.cache_backend == "memory":
        cache = InMemoryCacheGateway()
    else:
        cache = SQLAlchemyCacheGateway(session_maker)

    ai_gateway = build_ai_gateway(settings)
    if ai_gateway is None:
        logger.warning("AI gateway not configured - enrichment uses fallbacks")

    enrichment = AIEnrichmentAdapter(ai_gateway, quota_tracker)
    aggregator = FeedbackAggregator(
        repository=repository,
        cache=cache,
        enrichment=enrichment,
        quota_tracker=quota_tracker,
        seed_records=None if settings.seed_fallback_enabled else [],
    )

    # Store services in app state for dependency injection
    app.state.quota_tracker = quota_tracker
    app.state.aggregator = aggregator
    app.state.ai_gateway = ai_gateway

    logger.info("Feedback Analyzer started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Feedback Analyzer")

    if ai_gateway is not None:
        await ai_gateway.close()

    await close_database()

    logger.info("Feedback Analyzer shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Feedback Analyzer API",
    description="""
    ## Feedback Aggregation and Network Health Insights

    **Endpoints:**
    - `GET /api/feedback/summary` - Counts, sources, categories, sentiment
    - `GET /api/feedback/insights` - Critical issues, trends, recommendations, priority matrix
    - `GET /api/network/visualization` - Per-layer network stack health
    - `POST /api/feedback` - Upsert feedback records
    - `GET /api/usage` - Metered resource usage

    **Quota (per window, limit / reserved):**

    | Resource | Window | Limit | Reserved |
    |----------|--------|-------|----------|
    | ai-tokens | daily | 100000 | 10000 |
    | store-reads | 30 days | 500000 | 50000 |
    | store-writes | 30 days | 100000 | 10000 |
    | cache-reads | daily | 100000 | 10000 |
    | cache-writes | daily | 1000 | 100 |
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(feedback_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Reports AI gateway availability and remaining AI token budget.
    """
    checks = {
        "ai_gateway": "available" if getattr(request.app.state, "ai_gateway", None) else "not_configured",
    }

    quota_tracker = getattr(request.app.state, "quota_tracker", None)
    if quota_tracker is not None:
        checks["ai_tokens_remaining"] = quota_tracker.usage_stats()[ResourceClass.AI_TOKENS]["remaining"]

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Feedback Analyzer",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
    }


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "feedback_analyzer.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
