import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portal.core.config import VERSION, get_settings
from portal.core.errors import WorkflowError
from portal.core.logger import setup_logger
from portal.api.routers import projects, funding, ip_records, notifications, audit, roles, health
from portal.api.middleware.audit import AuditMiddleware
from portal.api.middleware.security_headers import SecurityHeadersMiddleware

settings = get_settings()
setup_logger("portal", log_dir=settings.log_dir, level=settings.log_level)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Approval workflow for projects, funding applications and IP records",
    version=VERSION,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    """Map workflow errors to their HTTP status with a {"detail": ...} body."""
    if exc.status_code >= 500:
        logger.error("Unhandled workflow error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=not settings.debug,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware
app.add_middleware(AuditMiddleware)

# Include routers
app.include_router(projects.router, prefix="/api")
app.include_router(funding.router, prefix="/api")
app.include_router(ip_records.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(audit.router, prefix="/api")
app.include_router(roles.router, prefix="/api")
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": VERSION,
        "docs": "/docs" if settings.debug else None,
    }
