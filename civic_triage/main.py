"""
FastAPI application main module.
Wires the report triage engine into HTTP endpoints with request logging and
uniform error envelopes.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import time
import uuid
from contextlib import asynccontextmanager
from civic_triage.api.v1 import api_router
from civic_triage.config import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from civic_triage.database import Base, SessionLocal, engine
from civic_triage.utils import setup_logging, get_logger

# Setup logging before creating the app
setup_logging(
    log_level=LOG_LEVEL,
    log_file=LOG_FILE,
    enable_console=True
)

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Creates tables on startup; nothing to tear down beyond logging.
    """
    logger.info("Application startup initiated")
    try:
        logger.info("Creating database tables")
        Base.metadata.create_all(bind=engine)
        logger.info("Application startup completed successfully")
        yield
    except Exception as e:  # pragma: no cover
        logger.error("Application startup failed", error=str(e), exc_info=True)
        raise
    finally:
        logger.info("Application shutdown completed")

app = FastAPI(
    title="Civic Report Triage",
    description="""
    Triage engine for citizen-submitted civic issue reports.

    ## Features
    * **Automatic priority** - Category severity weighted by nearby unresolved reports
    * **Fraud risk scoring** - Engagement and content heuristics with severity badges
    * **Role-scoped visibility** - Department and role constraints per administrator

    Administrators are identified by the `admin_id` path segment; authentication
    is handled by the surrounding platform.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")

def _error_response(request: Request, status_code: int, message, **extra) -> JSONResponse:
    """Uniform error envelope: success flag, message, request id, extras."""
    content = {"success": False, "message": message, "request_id": _request_id(request)}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))

@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Assign X-Request-ID, time the request and log its outcome."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    logger.debug(
        "Request started",
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None,
        request_id=request_id
    )

    response = await call_next(request)

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(elapsed_ms)

    logger.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        query=request.url.query or None,
        status_code=response.status_code,
        process_time_ms=elapsed_ms,
        request_id=request_id
    )
    return response

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(
        "Request validation failed",
        path=request.url.path,
        error_count=len(errors),
        fields=[".".join(str(part) for part in err.get("loc", ())) for err in errors],
        request_id=_request_id(request)
    )
    return _error_response(request, 422, "Request validation failed", details=errors)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Flatten structured details (visibility rejections) so clients can branch on ``reason``."""
    extra = {}
    message = exc.detail
    if isinstance(exc.detail, dict):
        message = exc.detail.get("message")
        extra = {
            "reason": exc.detail.get("reason"),
            "invalid_roles": exc.detail.get("invalid_roles", []),
        }

    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        detail=message,
        reason=extra.get("reason"),
        path=request.url.path,
        request_id=_request_id(request)
    )
    return _error_response(request, exc.status_code, message, **extra)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
        request_id=_request_id(request)
    )
    return _error_response(request, 500, "Internal server error")

@app.get("/health", tags=["health"], summary="Basic health check")
async def health_check():
    """Health check including database reachability."""
    database = "healthy"
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Health check: database unavailable", error=str(e))
        database = "unavailable"
    finally:
        db.close()
    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "service": "civic-report-triage",
        "version": "1.0.0",
        "timestamp": time.time(),
        "checks": {"database": database},
    }

@app.get("/", tags=["root"])
async def root():
    """API root endpoint with basic information."""
    return {
        "message": "Civic Report Triage API",
        "version": "1.0.0",
        "documentation": "/docs",
        "health_check": "/health",
        "api_base": "/api/v1"
    }

app.include_router(api_router, prefix="/api/v1")

if __name__ == "__main__":
    import uvicorn

    logger.info("Starting development server")

    uvicorn.run(
        "civic_triage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=["civic_triage"],
        log_level="info",
        access_log=True
    )
