from contextlib import asynccontextmanager
import asyncio
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging
import logfire

from scheduling_assistant.config import settings
from scheduling_assistant.database import init_db, close_db
from scheduling_assistant.exceptions import SchedulingError
from scheduling_assistant.api import api_router

logger = logging.getLogger(__name__)

# Initialize Logfire - instruments FastAPI requests and OpenAI calls
if settings.logfire_token:
    logfire.configure(
        token=settings.logfire_token,
        service_name="scheduling-assistant",
        environment=settings.app_env,
        console=False,
    )
    logfire.instrument_openai()
    print("✅ Logfire initialized")
else:
    print("⚠️ Logfire token not set - observability disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    print("🚀 Starting Scheduling Assistant API...")
    await init_db()
    print("✅ Database initialized")

    yield

    # Shutdown
    print("👋 Shutting down...")
    await close_db()
    print("✅ Database connections closed")


app = FastAPI(
    title=settings.app_name,
    description="Chat-driven appointment scheduling assistant",
    version="1.0.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
if settings.logfire_token:
    logfire.instrument_fastapi(app)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "details": details}},
    )


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    return JSONResponse(status_code=exc.status_code, content={"error": jsonable_encoder(exc.to_dict())})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(422, "validation-error", "Request validation failed", jsonable_encoder(exc.errors()))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return error_response(503, "upstream-failure", "Database unavailable")


@app.exception_handler(OSError)
@app.exception_handler(asyncio.TimeoutError)
async def connection_error_handler(request: Request, exc: Exception):
    # Driver-level connect failures reach us unwrapped by SQLAlchemy
    logger.exception("Connection error on %s %s", request.method, request.url.path)
    return error_response(503, "upstream-failure", "Database unavailable")


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "configured",
        "llm": "configured" if settings.openai_api_key else "not_configured",
        "email": "configured" if settings.resend_api_key else "not_configured",
    }
