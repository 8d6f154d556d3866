"""RFC 7807 Problem Details error handling.

Every failure leaves the API as ``application/problem+json``. Validation
failures additionally carry ``errors``: a map of field name to messages so a
form can highlight the offending inputs.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

NON_FIELD_ERRORS = "non_field_errors"


class ProblemDetailError(Exception):
    """Raise for RFC 7807 problem+json responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: str,
        error_type: str | None = None,
        extra: dict | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(detail)
        self.status = status
        self.title = title
        self.detail = detail
        self.error_type = error_type or "about:blank"
        self.extra = extra or {}
        self.headers = headers


class FieldValidationError(ProblemDetailError):
    """Client-caused input error with a per-field breakdown."""

    def __init__(self, errors: dict[str, list[str]], detail: str = "Validation failed"):
        super().__init__(
            status=422,
            title="Validation Error",
            detail=detail,
            extra={"errors": errors},
        )
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "FieldValidationError":
        return cls({field: [message]})


class NotFoundError(ProblemDetailError):
    def __init__(self, entity: str):
        super().__init__(status=404, title="Not Found", detail=f"{entity} not found")
        self.entity = entity


class AuthenticationRequired(ProblemDetailError):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status=401,
            title="Unauthorized",
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDenied(ProblemDetailError):
    def __init__(self, detail: str = "Insufficient role"):
        super().__init__(status=403, title="Forbidden", detail=detail)


class UpstreamError(ProblemDetailError):
    """The datastore or object storage failed; ``step`` names where."""

    def __init__(self, step: str, detail: str):
        super().__init__(
            status=502,
            title="Upstream Failure",
            detail=detail,
            extra={"step": step},
        )
        self.step = step


class RateLimitExceeded(ProblemDetailError):
    def __init__(self, headers: dict[str, str]):
        super().__init__(
            status=429,
            title="Too Many Requests",
            detail="Rate limit exceeded, try again later",
            headers=headers,
        )


def _problem(request: Request, status: int, title: str, detail, **extra) -> dict:
    body = {
        "type": extra.pop("type", "about:blank"),
        "title": title,
        "status": status,
        "detail": detail,
        "instance": str(request.url.path),
    }
    body.update(extra)
    return body


async def problem_detail_handler(request: Request, exc: ProblemDetailError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status,
        content=_problem(
            request, exc.status, exc.title, exc.detail, type=exc.error_type, **exc.extra
        ),
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_problem(
            request,
            exc.status_code,
            exc.detail if isinstance(exc.detail, str) else "Error",
            exc.detail,
        ),
        headers=getattr(exc, "headers", None),
        media_type="application/problem+json",
    )


def field_errors_from_pydantic(errors: list[dict]) -> dict[str, list[str]]:
    """Collapse pydantic error dicts into ``{field: [messages]}``.

    The location prefix (``body``/``query``/``path``) is dropped; nested
    locations are dotted. Model-level errors land under ``non_field_errors``.
    """
    grouped: dict[str, list[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "cookie", "form"):
            loc = loc[1:]
        field = ".".join(loc) or NON_FIELD_ERRORS
        grouped.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return grouped


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=_problem(
            request,
            422,
            "Validation Error",
            "Request validation failed",
            errors=field_errors_from_pydantic(exc.errors()),
        ),
        media_type="application/problem+json",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=_problem(request, 500, "Internal Server Error", "An unexpected error occurred"),
        media_type="application/problem+json",
    )
