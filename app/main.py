"""
Main application entry point.

This module initializes the FastAPI application, wires the report
components and includes all routers.
"""

from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.email import EmailDispatcher
from app.core.exceptions import ReportifyError
from app.core.logging import logger
from app.core.middleware import RequestLoggingMiddleware
from app.core.scheduler import create_scheduler, start_scheduler, stop_scheduler
from app.db.session import AsyncSessionLocal, engine, init_db
from app.routers.exports import router as exports_router
from app.routers.health import router as health_router
from app.routers.reports import router as reports_router
from app.routers.schedule import router as schedule_router
from app.services.export import ReportExporter
from app.services.schedule import ScheduleManager


app = FastAPI(
    title=settings.api.title,
    description=settings.api.description,
    version=settings.api.version,
    debug=settings.debug,
)

app.add_middleware(RequestLoggingMiddleware)

# Add CORS middleware
origins = settings.frontend_urls

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Report components, built once with explicit configuration
app.state.exporter = ReportExporter(title=settings.report_title)
app.state.dispatcher = EmailDispatcher(settings.email, report_title=settings.report_title)
app.state.scheduler = create_scheduler(settings.scheduler)
app.state.schedule_manager = ScheduleManager(
    scheduler=app.state.scheduler,
    session_factory=AsyncSessionLocal,
    exporter=app.state.exporter,
    dispatcher=app.state.dispatcher,
)

# Include routers with /api prefix
app.include_router(
    health_router,
    prefix="/api/health",
    tags=["health"],
)
app.include_router(
    health_router,
    prefix="/health",
    tags=["health"],
    include_in_schema=False,
)
app.include_router(
    reports_router,
    prefix="/api",
    tags=["reports"],
)
app.include_router(
    exports_router,
    prefix="/api/export",
    tags=["exports"],
)
app.include_router(
    schedule_router,
    prefix="/api",
    tags=["schedule"],
)


def _error_body(message: str, details=None) -> dict:
    body = {"error": message}
    if details is not None and not settings.is_production:
        body["details"] = details
    return body


@app.exception_handler(ReportifyError)
async def reportify_error_handler(request: Request, exc: ReportifyError) -> JSONResponse:
    """Convert service errors into the JSON error envelope."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} failed: {exc.message} ({type(exc).__name__})")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with field-level messages."""
    fields = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path} rejected: {fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": fields},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", str(exc)),
    )


@app.on_event("startup")
async def startup_event():
    """Actions to run on application startup."""
    logger.info(f"Starting {settings.api.title}")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Database URL: {settings.database.url[:20]}...")
    logger.info(f"Allowed CORS origins: {', '.join(origins)}")
    logger.info(f"SMTP user: {'Configured' if settings.smtp_username else 'MISSING'}")

    await init_db()

    if settings.scheduler.restore_on_startup:
        async with AsyncSessionLocal() as db:
            await app.state.schedule_manager.restore(db)

    start_scheduler(app.state.scheduler, enabled=settings.scheduler.enabled)

    logger.info(f"API Docs available at: http://{settings.api.host}:{settings.api.port}/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Actions to run on application shutdown."""
    logger.info(f"Shutting down {settings.api.title}")
    stop_scheduler(app.state.scheduler)
    await engine.dispose()


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"{settings.api.title} is running",
        "version": settings.api.version,
        "docs": "/docs",
        "endpoints": {
            "health": "/api/health",
            "reports": "/api/reports",
            "exportExcel": "/api/export/excel",
            "exportPdf": "/api/export/pdf",
            "scheduleReport": "/api/schedule-report",
            "schedule": "/api/schedule",
        },
        "scheduledJobs": len(app.state.schedule_manager.list_jobs()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
