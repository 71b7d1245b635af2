from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.config import settings
from app.api.v1.router import api_router
from app.core.logging import setup_logging
from app.core.realtime import LiveSessionHub
from app.database import init_db, async_session_factory
from app.services.admin_notifications import (
    DatabaseSettingsProvider,
    EmailChannel,
    NotificationDispatcher,
    WallChannel,
)
from app.services.eligibility import EligibilityError
from app.services.customer_emails import CustomerMailer
from app.services.email_service import EmailService
from app.services.order_service import OrderNotFoundError
from app.services.return_request_service import ReturnRequestNotFoundError
from app.services.settings_service import NotificationSettingsError
from app.services.status_transitions import InvalidTransitionError


logger = logging.getLogger(__name__)


def build_dispatcher(session_factory, live_sessions: LiveSessionHub, email_service: EmailService) -> NotificationDispatcher:
    """Wire the admin notification dispatcher from its collaborators."""
    return NotificationDispatcher(
        settings_provider=DatabaseSettingsProvider(session_factory),
        channels=[
            EmailChannel(email_service),
            WallChannel(session_factory, live_sessions),
        ],
        fallback_email=settings.fallback_admin_email,
        delivery_timeout=settings.NOTIFICATION_DELIVERY_TIMEOUT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables, build the live session hub, the admin
    notification dispatcher and the customer mailer and keep them on app.state.
    """
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await init_db()

    email_service = EmailService.from_settings()
    app.state.session_factory = async_session_factory
    app.state.live_sessions = LiveSessionHub()
    app.state.notification_dispatcher = build_dispatcher(
        async_session_factory,
        app.state.live_sessions,
        email_service,
    )
    app.state.customer_mailer = CustomerMailer(email_service)
    if not email_service.is_configured:
        logger.warning("SMTP credentials missing; admin and customer emails will be reported as failed")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


# ==================== Exception Handlers ====================

def _error_response(status_code: int, exc) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "type": type(exc).__name__,
            "details": exc.details,
        },
    )


@app.exception_handler(EligibilityError)
async def eligibility_error_handler(request: Request, exc: EligibilityError):
    return _error_response(400, exc)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return _error_response(409, exc)


@app.exception_handler(OrderNotFoundError)
@app.exception_handler(ReturnRequestNotFoundError)
async def not_found_handler(request: Request, exc: Exception):
    return _error_response(404, exc)


@app.exception_handler(NotificationSettingsError)
async def settings_error_handler(request: Request, exc: NotificationSettingsError):
    return _error_response(422, exc)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }
