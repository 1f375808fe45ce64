"""
Gridboard - Main Application
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from gridboard.core.config import settings
from gridboard.core.logging import logger
from gridboard.database import database
from gridboard.endpoints import health
from gridboard.endpoints import dashboards
from gridboard.endpoints import layouts
from gridboard.endpoints import shares
from gridboard.endpoints import widgets
from gridboard.middleware.authentication import verify_gateway_user
from gridboard.middleware.rate_limiter import limiter, init_redis, close_redis, rate_limit_handler
from gridboard.services.dashboard_manager import DashboardManager
from gridboard.services.catalog_service import WidgetCatalogService
from gridboard.services.dashboard_service import DashboardService
from gridboard.services.layout_service import LayoutService
from gridboard.services.share_service import ShareService


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    try:
        await database.connect()
        db = await database.get_database()
        await DashboardManager(
            dashboards=DashboardService(db),
            layouts=LayoutService(db),
            shares=ShareService(db),
            catalog=WidgetCatalogService(db),
        ).ensure_indexes()
        await init_redis()
        logger.info("Application startup complete")
    except Exception as e:
        logger.error(f"Failed to start application: {str(e)}")
        raise
    yield
    logger.info("Shutting down application")
    await close_redis()
    await database.disconnect()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    debug=settings.DEBUG,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Store and driver messages stay in the logs, never in the response.
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Applies the default limit to every route without its own; runs inside the
# gateway middleware so requests are keyed by user
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Gateway authentication middleware
app.middleware("http")(verify_gateway_user)

app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(dashboards.router, prefix="/api/v1", tags=["dashboards"])
app.include_router(layouts.router, prefix="/api/v1", tags=["layouts"])
app.include_router(shares.router, prefix="/api/v1", tags=["shares"])
app.include_router(widgets.router, prefix="/api/v1", tags=["widgets"])


@app.get("/", tags=["root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
