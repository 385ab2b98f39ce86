"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import bookings, courts, reports, venues
from app.core.config import Settings, settings as default_settings
from app.core.database import Database
from app.services.booking_service import BookingService
from app.services.email_service import EmailService
from app.services.notifications import NotificationQueue
from app.services.payment_gateway import PaymentGateway, build_payment_gateway
from app.services.report_service import build_report_service
from app.services.scheduler import CompletionScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings = default_settings,
    payment_gateway: Optional[PaymentGateway] = None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    """
    Build the application.

    Every long-lived collaborator is created in the lifespan and torn down on
    shutdown; routes reach them through app.state.

    Args:
        settings: Configuration to run with
        payment_gateway: Gateway to charge with (defaults to PAYMENT_PROVIDER)
        email_service: Mailer for the notification queue (defaults to SendGrid)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        # Startup
        logger.info("Starting QuickCourt booking service")
        logger.info(f"Debug mode: {settings.DEBUG}")

        database = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        await database.connect(create_tables=settings.DATABASE_CREATE_TABLES)

        notifier = NotificationQueue(
            email_service or EmailService(settings.SENDGRID_API_KEY, settings.MAIL_FROM_EMAIL),
            maxsize=settings.NOTIFICATION_QUEUE_SIZE,
        )
        await notifier.start()

        booking_service = BookingService(
            payment_gateway=payment_gateway or build_payment_gateway(settings),
            notifier=notifier,
            payment_timeout=settings.PAYMENT_TIMEOUT_SECONDS,
            cancellation_lead_hours=settings.CANCELLATION_LEAD_HOURS,
            pending_timeout_minutes=settings.PENDING_TIMEOUT_MINUTES,
        )

        scheduler = CompletionScheduler(
            database.session_factory,
            booking_service,
            interval_minutes=settings.COMPLETION_SWEEP_MINUTES,
        )
        if settings.COMPLETION_SWEEP_ENABLED:
            await scheduler.start()

        app.state.settings = settings
        app.state.database = database
        app.state.notifier = notifier
        app.state.booking_service = booking_service
        app.state.report_service = build_report_service(settings.REPORTS_ENABLED)
        app.state.scheduler = scheduler

        yield

        # Shutdown
        logger.info("Shutting down QuickCourt booking service")
        await scheduler.stop()
        await notifier.stop()
        await database.dispose()

    app = FastAPI(
        title="QuickCourt",
        description="Book sports courts: conflict-checked, priced and paid in one step",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"},
        )

    # Include routers
    app.include_router(venues.router)
    app.include_router(courts.router)
    app.include_router(bookings.router)
    app.include_router(reports.router)

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "scheduler_running": request.app.state.scheduler.running,
            "notifier_running": request.app.state.notifier.running,
        }

    return app


app = create_app()
