import sys
from datetime import datetime, timezone
from pathlib import Path
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopboard.app.api import dashboard
from shopboard.app.core.logging import setup_logging, get_logger, RequestLoggingMiddleware
from shopboard.app.core.settings import get_settings
from shopboard.app.core.metrics import PrometheusMiddleware, get_metrics_response
from shopboard.app.schemas import HealthResponse
from shopboard.app.services.marketplace import build_data_source

# Load and validate settings
try:
    settings = get_settings()
except ValueError as e:
    print(f"Configuration error: {e}", file=sys.stderr)
    sys.exit(1)

# Use JSON format in production
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=settings.is_production
)

logger = get_logger(__name__)

logger.info(
    "Application configuration loaded",
    environment=settings.ENVIRONMENT,
    has_api_key=bool(settings.ETSY_API_KEY),
    has_shop_id=bool(settings.ETSY_SHOP_ID),
)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Server running",
        port=settings.PORT,
        dashboard="/",
        api="/api/etsy-data",
        health="/health",
    )
    if settings.has_api_keys:
        logger.info("Using real Etsy API")
    else:
        logger.warning("Using mock data - set ETSY_API_KEY and ETSY_SHOP_ID for real data")
    yield
    logger.info("Application shutting down")


app = FastAPI(title="Shopboard", lifespan=lifespan)

# Chosen once; handlers get it through deps.get_data_source
app.state.data_source = build_data_source(settings)

ALLOWED_ORIGINS = settings.allowed_origins_list
if not ALLOWED_ORIGINS:
    ALLOWED_ORIGINS = ["*"]
    logger.info("CORS: allowing all origins")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(dashboard.router, tags=["dashboard"])
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        logger.info("Unknown route", path=request.url.path)
        return JSONResponse(
            status_code=404,
            content={"error": "Route not found", "path": request.url.path},
        )
    return await http_exception_handler(request, exc)


@app.get("/")
async def root():
    """Serve the browser dashboard."""
    return FileResponse(STATIC_DIR / "index.html")


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe; also reports whether live credentials are configured."""
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        has_api_keys=settings.has_api_keys,
        port=settings.PORT,
    )


@app.get("/metrics")
async def metrics_endpoint(openmetrics: bool = False):
    """Prometheus scrape target."""
    return get_metrics_response(openmetrics=openmetrics)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
