from contextlib import asynccontextmanager
from typing import Any, Dict
from fastapi import FastAPI, Request, Depends, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from prometheus_client import generate_latest, REGISTRY
from prometheus_client.exposition import CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from .api.routes import (
    admin_routes,
    functions_routes,
    registry_routes,
    surgery_request_routes,
    budget_routes,
    tracking_routes,
    dashboard_routes,
)
from .api.models.user_models import HealthResponse
from .core.logging_config import setup_logging
from .core.exceptions import CirPlaneError
from .core.monitoring.audit_logger import AuditLogger
from .api.dependencies import get_audit_logger
from .core.database.db_session import engine as async_engine, get_db_session
from .core.config.settings import get_settings

setup_logging() # Initialize logging
logger = structlog.get_logger(__name__)


# --- DB Pool Warmup ---
async def warmup_db_pool():
    logger.info("Application startup: warming up database connection pool...")
    app_settings = get_settings()
    warmup_count = min(app_settings.DB_POOL_SIZE, 3)

    try:
        for i in range(warmup_count):
            async with async_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.debug("DB warmup connection successful", connection=i + 1, total=warmup_count)
        logger.info("Database connection pool warmed up", connections=warmup_count)
    except Exception as e:
        # The API still starts; /ready reports the database as unhealthy.
        logger.error("Error during database connection pool warmup", error=str(e), exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await warmup_db_pool()
    yield
    logger.info("Application shutdown: disposing database engine.")
    await async_engine.dispose()


settings = get_settings()
app = FastAPI(title=settings.SERVICE_NAME, version=settings.APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["Content-Type", "Authorization"],
)


CREATE_USER_PATH = "/create-user"


# --- Error rendering: every error body is {"error": message} ---

@app.exception_handler(CirPlaneError)
async def cirplane_error_handler(request: Request, exc: CirPlaneError):
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, status_code=exc.status_code, error=exc.message)
    else:
        logger.info("Request rejected", path=request.url.path, status_code=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = "Rota não encontrada"
    elif exc.status_code == 405:
        message = "Method not allowed"
    else:
        message = exc.detail
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        status_code, message = 400, "JSON inválido"
    else:
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Campo inválido: {field}" if field else "Dados inválidos"
        # create-user reports every input problem as a 400, like its own field checks
        status_code = 400 if request.url.path.endswith(CREATE_USER_PATH) else 422
    logger.info("Request body rejected", path=request.url.path, status_code=status_code,
                error_types=[error.get("type") for error in errors])
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Erro interno do servidor"})


# --- Routers ---

app.include_router(admin_routes.router, prefix="/api", tags=["Admin"])
app.include_router(functions_routes.router, prefix=settings.FUNCTIONS_PATH.rstrip("/"), tags=["Functions"])

app.include_router(registry_routes.patients_router, prefix="/api/v1/patients", tags=["Patients"])
app.include_router(registry_routes.doctors_router, prefix="/api/v1/doctors", tags=["Doctors"])
app.include_router(registry_routes.hospitals_router, prefix="/api/v1/hospitals", tags=["Hospitals"])
app.include_router(registry_routes.suppliers_router, prefix="/api/v1/suppliers", tags=["Suppliers"])
app.include_router(registry_routes.opmes_router, prefix="/api/v1/opmes", tags=["OPMEs"])
app.include_router(registry_routes.procedures_router, prefix="/api/v1/procedures", tags=["Procedures"])
app.include_router(registry_routes.anesthesia_types_router, prefix="/api/v1/anesthesia-types", tags=["Anesthesia Types"])
app.include_router(surgery_request_routes.router, prefix="/api/v1/surgery-requests", tags=["Surgery Requests"])
app.include_router(budget_routes.router, prefix="/api/v1/budgets", tags=["Budgets"])
app.include_router(tracking_routes.user_requests_router, prefix="/api/v1/user-surgery-requests", tags=["User Surgery Requests"])
app.include_router(tracking_routes.tracking_router, prefix="/api/v1/budget-tracking", tags=["Budget Tracking"])
app.include_router(dashboard_routes.router, prefix="/api/v1/dashboard", tags=["Dashboard"])


@app.get("/health", response_model=HealthResponse, tags=["Monitoring"])
async def health_check(
    request: Request,
    audit_logger: AuditLogger = Depends(get_audit_logger)
):
    logger.info("Health check accessed")
    response_data = admin_routes.build_health_response()

    await audit_logger.log_request(request, "HEALTH_CHECK", resource="System")
    return response_data


@app.get("/metrics", tags=["Monitoring"])
async def get_metrics():
    """
    Exposes Prometheus metrics.
    """
    logger.debug("Metrics endpoint called.")
    return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


@app.get("/ready", tags=["Monitoring"])
async def readiness_check(db: AsyncSession = Depends(get_db_session)) -> Dict[str, Any]:
    checks = {
        "database": {"status": "unhealthy", "details": "Check not performed"},
    }

    try:
        result = await db.execute(text("SELECT 1"))
        if result.scalar_one() == 1:
            checks["database"]["status"] = "healthy"
            checks["database"]["details"] = "Successfully connected and queried."
        else:
            checks["database"]["details"] = "Query executed but result was unexpected."
    except Exception as e:
        logger.error("Readiness check: Database connection failed", error=str(e), exc_info=False)
        checks["database"]["details"] = f"Connection failed: {str(e)}"

    if checks["database"]["status"] != "healthy":
        logger.warn("Readiness check failed", overall_status=checks)
        raise HTTPException(status_code=503, detail=checks)

    logger.info("Readiness check successful", overall_status=checks)
    return checks
