# main.py
# Creates the FastAPI app, configures logging, Sentry, middleware and error
# handlers, and includes the routers that hold the endpoint logic.

import uuid
import time
import logging
from contextvars import ContextVar
from pythonjsonlogger import jsonlogger
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPBearer
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest # Renamed to avoid shadowing
from starlette.responses import Response as StarletteResponse

from jose import jwt, JWTError

# --- Rate Limiting Imports ---
from slowapi.errors import RateLimitExceeded
from limits.util import parse_many
from rate_limiter import limiter, get_dynamic_rate_limit

# --- Local Project Imports ---
import config
from config import SECRET_KEY, ALGORITHM, SENTRY_DSN, CORS_ORIGINS
from db.database import create_db_and_tables
from routers import auth as auth_router
from routers import favorites as favorites_router
from routers import health as health_router
from routers import photos as photos_router
from services.errors import PhotoAppError

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from typing import Callable, Awaitable, Optional

RequestResponseCall = Callable[[StarletteRequest], Awaitable[StarletteResponse]]


# --- Logging Configuration ---
# Configure this early so all subsequent modules can use it.
log_handler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter(
    '%(asctime)s %(levelname)s %(name)s %(module)s %(funcName)s %(lineno)d %(message)s '
    '%(request_id)s %(user_id)s %(path)s %(method)s %(status_code)s %(response_time_ms)s'
)
log_handler.setFormatter(formatter)

# Configure the root logger to capture logs from all libraries (e.g., sqlalchemy, uvicorn)
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)
# Remove any default handlers to avoid duplicate logs
for handler in root_logger.handlers[:]:
    root_logger.removeHandler(handler)
root_logger.addHandler(log_handler)

logger = logging.getLogger(__name__)

# Request context for log records, set and reset by RequestIdMiddleware.
request_id_var: ContextVar[str] = ContextVar("request_id", default="N/A")
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

_base_record_factory = logging.getLogRecordFactory()

def request_context_record_factory(*args, **kwargs):
    record = _base_record_factory(*args, **kwargs)
    record.request_id = request_id_var.get()
    record.user_id = user_id_var.get()
    return record

# Installed once; never swapped per request.
logging.setLogRecordFactory(request_context_record_factory)


# --- Sentry Initialization ---
if SENTRY_DSN and SENTRY_DSN != "your-sentry-dsn-goes-here":
    sentry_logging = LoggingIntegration(
        level=logging.INFO,         # Breadcrumbs level
        event_level=logging.ERROR   # Event level
    )
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[sentry_logging],
        traces_sample_rate=1.0,
    )
    logger.info("Sentry initialized.")
else:
    logger.warning("Sentry DSN not found or is a placeholder. Sentry will not be initialized.")


# --- Middleware Definitions ---

class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: StarletteRequest, call_next: RequestResponseCall) -> StarletteResponse:
        request_id = uuid.uuid4().hex
        request.state.request_id = request_id

        user_id_for_log = "anonymous"
        try:
            token_creds = await HTTPBearer(auto_error=False)(request)
            if token_creds and token_creds.credentials:
                payload = jwt.decode(token_creds.credentials, SECRET_KEY, algorithms=[ALGORITHM])
                user_id_for_log = payload.get("user_id") or payload.get("sub")
        except JWTError:
            pass  # Token is invalid or expired. Fine for logging.

        request.state.user_id = user_id_for_log

        request_id_token = request_id_var.set(request_id)
        user_id_token = user_id_var.set(user_id_for_log)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(request_id_token)
            user_id_var.reset(user_id_token)

        response.headers['X-Request-ID'] = request_id
        return response

class ResponseTimeLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: StarletteRequest, call_next: RequestResponseCall) -> StarletteResponse:
        start_time = time.time()
        response = await call_next(request)
        process_time_ms = (time.time() - start_time) * 1000

        # request_id and user_id are added by request_context_record_factory.
        log_details = {
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "response_time_ms": round(process_time_ms, 2)
        }
        logger.info("Request processed", extra=log_details)
        return response

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: StarletteRequest, call_next: RequestResponseCall) -> StarletteResponse:
        response = await call_next(request)
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

class RateLimitHeaderMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: StarletteRequest, call_next: RequestResponseCall) -> StarletteResponse:
        response = await call_next(request)

        # Only rate-limited routes run the key function that sets this.
        key = getattr(request.state, 'rate_limit_key', None)
        if not key:
            return response

        try:
            limit_list = parse_many(get_dynamic_rate_limit(key))
            if limit_list:
                response.headers["X-RateLimit-Limit"] = str(limit_list[0].amount)
        except ValueError as e:
            logger.error(f"Error adding rate limit headers: {e}", exc_info=True)

        return response


# --- Exception Handlers ---

async def custom_rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Custom handler to add rate limit headers to 429 responses."""
    response = JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"message": f"Rate limit exceeded: {exc.detail}"}
    )
    limit = getattr(exc, "limit", None)
    if limit is not None:
        response.headers["X-RateLimit-Limit"] = str(limit.limit.amount)
        response.headers["X-RateLimit-Remaining"] = "0"
    return response

async def photo_app_error_handler(request: Request, exc: PhotoAppError):
    """Maps service-layer errors to their HTTP status with a `message` body."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


# --- Application Events ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    if config.ENVIRONMENT == "production":
        config.validate_configuration()
    create_db_and_tables()
    logger.info("Database tables checked/created.")
    yield
    logger.info("Application shutting down.")


app = FastAPI(
    lifespan=lifespan,
    title="Photo Favorites API",
    description="Browse and search photos from an external source and keep a list of favorites.",
    version="1.0.0"
)

# Add Rate Limiter state and exception handlers
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)
app.add_exception_handler(PhotoAppError, photo_app_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Last added is outermost. RequestIdMiddleware wraps everything so the
# response-time record still carries the request id.
app.add_middleware(RateLimitHeaderMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ResponseTimeLoggingMiddleware)
app.add_middleware(RequestIdMiddleware)


# --- Include Routers ---
app.include_router(auth_router.router, tags=["Authentication"])
app.include_router(photos_router.router, tags=["Photos"])
app.include_router(favorites_router.router, tags=["Favorites"])
app.include_router(health_router.router, tags=["Health"])


@app.get("/api/test", tags=["Root"])
async def api_test():
    """Simple check that the API router is mounted."""
    return "All good in here"
