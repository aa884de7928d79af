from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager

from compositor import __version__
from compositor.errors import CompositorError

from .routes import router
from .config import operator_config
from .models import HealthResponse
from .security import get_cors_config, resolve_bind_host

# Configure logging
logging.basicConfig(
    level=getattr(logging, operator_config.get("server.log_level", "INFO").upper()),
    format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("[api] Starting Image Compositor API")
    host = resolve_bind_host()
    logger.info(f"[api] Server configured for {host}:{operator_config.get('server.port')}")

    yield

    logger.info("[api] Shutting down Image Compositor API")


# Create FastAPI app
app = FastAPI(
    title="Image Compositor API",
    description="Renders branded promo creatives as PNG, PDF or MP4",
    version=__version__,
    lifespan=lifespan
)

# Add CORS middleware (configurable via operator.yaml)
cors_config = get_cors_config()
if cors_config["allow_origins"]:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config["allow_origins"],
        allow_credentials=cors_config["allow_credentials"],
        allow_methods=cors_config["allow_methods"],
        allow_headers=cors_config["allow_headers"],
        expose_headers=cors_config["expose_headers"],
        max_age=cors_config["max_age"]
    )
    logger.info("[api] CORS enabled with configuration")
else:
    logger.info("[api] CORS disabled (default security)")


@app.exception_handler(CompositorError)
async def compositor_error_handler(request: Request, exc: CompositorError):
    """Expected failures become a structured body with their own status"""
    logger.warning(f"[api] {request.url.path} failed ({exc.category}): {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"[api] Error composing image on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to compose image", "category": "internal", "details": str(exc)},
    )


# Include routes
app.include_router(router, prefix="/api")


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse()
