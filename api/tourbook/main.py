"""
Tourbook API - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, Response
from pydantic import ValidationError as SchemaValidationError
import time
import logging

# Prometheus metrics
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST, REGISTRY

from tourbook.config import settings
from tourbook.exceptions import TourbookError, ValidationError

# Define Prometheus metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint']
)
from tourbook.routers import health, site, admin_packages, admin_categories, admin_content
from tourbook.utils.redis import init_redis, close_redis
from tourbook.utils.mongodb import init_mongodb, close_mongodb

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager - handles startup and shutdown events
    """
    # Startup
    logger.info("Starting Tourbook API...")

    await init_mongodb()
    await init_redis()

    logger.info("Tourbook API ready to serve requests!")

    yield

    # Shutdown
    logger.info("Shutting down Tourbook API...")

    await close_redis()
    await close_mongodb()

    logger.info("Cleanup completed")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## Tour Package Marketing & Booking Content API

    ### Features
    - Manage tour packages, categories and subcategories
    - Manage banners, blogs, gallery items and testimonials
    - Browse and filter active packages for the public site
    """,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware with Prometheus metrics
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    # Record metrics (skip /metrics endpoint to avoid recursion)
    if request.url.path != "/metrics":
        route = request.scope.get("route")
        endpoint = route.path if route is not None else request.url.path
        method = request.method
        status = response.status_code

        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(process_time)

    response.headers["X-Process-Time"] = str(process_time)
    return response


# Error handlers
@app.exception_handler(TourbookError)
async def tourbook_error_handler(request: Request, exc: TourbookError):
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.field:
        content["field"] = exc.field
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return ORJSONResponse(status_code=exc.status_code, content=content)


def _describe_errors(errors) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts)


@app.exception_handler(RequestValidationError)
@app.exception_handler(SchemaValidationError)
async def request_validation_handler(request: Request, exc):
    return ORJSONResponse(status_code=400, content={"detail": _describe_errors(exc.errors())})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions - details only in debug mode"""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return ORJSONResponse(
        status_code=500,
        content={"detail": str(exc) if settings.DEBUG else "An unexpected error occurred"},
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(admin_packages.router, prefix="/admin/packages", tags=["Admin - Packages"])
app.include_router(admin_categories.router, prefix="/admin/categories", tags=["Admin - Categories"])
app.include_router(admin_content.router, prefix="/admin", tags=["Admin - Content"])
app.include_router(site.router, tags=["Site"])


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tourbook.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
