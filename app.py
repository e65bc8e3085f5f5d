"""
VaidyaPortal Backend
Main FastAPI application for the doctor portal
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configuration and database
from config import settings
from database import init_db, DatabaseHealthCheck

from api import include_routers
from services.llm_service import llm_service
from tools.notification_service import notification_service

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


# ==================== LIFESPAN ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENV}")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    if not llm_service.is_configured:
        logger.warning("AI prescription drafting disabled: GOOGLE_API_KEY not set")
    if not notification_service.is_configured:
        logger.warning("Prescription notifications disabled: NOTIFICATION_URL not set")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")


# ==================== APP INITIALIZATION ====================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## VaidyaPortal API

    Backend for the doctor side of an Ayurvedic telehealth platform.

    ### Features
    - **Prescriptions**: Draft, edit, send and retire prescriptions
    - **Adherence Progress**: Per-prescription dose adherence summaries
    - **AI Drafting**: Gemini-assisted prescription drafts with safety context
    - **Practice**: Appointments, patients, dashboard statistics and profile
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Attach modular API routers (prefix /api/v1)
include_routers(app)


# ==================== EXCEPTION HANDLERS ====================

def error_response(status_code: int, error, **extra) -> JSONResponse:
    content = {
        "success": False,
        "error": error,
        "status_code": status_code,
        "timestamp": datetime.utcnow().isoformat()
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    return error_response(exc.status_code, exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    return error_response(422, "Invalid request", details=jsonable_errors(exc))


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.url.path}: {exc}", exc_info=True)
    message = str(getattr(exc, "orig", None) or exc)
    return error_response(500, message)


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return error_response(500, "An unexpected error occurred" if not settings.DEBUG else str(exc))


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


# ==================== HEALTH ENDPOINTS ====================

@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic health check"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check endpoint"""
    database_check = DatabaseHealthCheck.describe()

    return {
        "status": "healthy" if database_check["status"] == "up" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {
            "database": database_check,
            "llm": {
                "provider": llm_service.provider,
                "model": llm_service.model_name,
                "configured": llm_service.is_configured
            },
            "notifications": notification_service.get_stats()
        },
        "version": settings.APP_VERSION,
        "environment": settings.ENV
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
