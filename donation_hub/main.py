"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from donation_hub.api.v1.router import api_v1_router
from donation_hub.core.config import VERSION
from donation_hub.core.exceptions import (
    ProblemDetailError,
    http_exception_handler,
    problem_detail_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from donation_hub.core.logging import configure_logging
from donation_hub.core.middleware.cors import get_cors_config
from donation_hub.core.middleware.request_id import RequestIdMiddleware

configure_logging()

app = FastAPI(
    title="Donation Hub API",
    version=VERSION,
    docs_url="/docs",
    openapi_url="/openapi.json",
)

# Middleware (last added = first executed)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(CORSMiddleware, **get_cors_config())

# Exception handlers (RFC 7807)
app.add_exception_handler(ProblemDetailError, problem_detail_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Routes
app.include_router(api_v1_router, prefix="/api/v1")
