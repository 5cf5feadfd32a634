from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.config.settings import settings
from app.routes import razorpay
from app.schemas import HealthResponse
from app.utils.exceptions import WebhookException
import logging
import uvicorn


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.
    - Startup: Log destination configuration
    - Shutdown: Nothing to release; the Sheets client holds no open connections
    """
    # Startup
    if not settings.RAZORPAY_WEBHOOK_SECRET:
        logger.warning("RAZORPAY_WEBHOOK_SECRET is not set; every webhook will be rejected")
    if not settings.PRIMARY_SHEET_ID and not settings.SHEET_WEB_APP_URL:
        logger.warning("No sheet destination configured; accepted payments will be dropped")
    logger.info("Razorpay sheets forwarder started (%s)", settings.ENVIRONMENT)

    yield

    # Shutdown
    logger.info("Razorpay sheets forwarder stopped")


app = FastAPI(
    title="Razorpay Sheets Forwarder",
    description="Receives Razorpay payment webhooks and appends them to Google Sheets",
    version="1.0.0",
    lifespan=lifespan,
)


# Exception handlers
@app.exception_handler(WebhookException)
async def webhook_exception_handler(request, exc: WebhookException):
    """Handle webhook intake exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(razorpay.router)


@app.get("/health", tags=["health"], response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        service="razorpay-sheets",
        version="1.0.0",
    )


def run():
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
