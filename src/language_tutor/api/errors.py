"""Exception handlers that keep every error response in the ``{error}`` shape."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from language_tutor.api.routes import CORS_HEADERS
from language_tutor.models.result import Err, ErrorKind


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == ErrorKind.METHOD_NOT_ALLOWED.status_code:
        message = "Method not allowed"
    elif isinstance(exc.detail, str):
        message = exc.detail
    else:
        message = "Request failed"
    headers = {**CORS_HEADERS, **(exc.headers or {})}
    return JSONResponse({"error": message}, status_code=exc.status_code, headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    err = Err(ErrorKind.INVALID_REQUEST, "Invalid request body", details=details)
    return JSONResponse(err.to_body(), status_code=err.kind.status_code, headers=CORS_HEADERS)


def install_error_handlers(app: FastAPI) -> None:
    """Register the gateway's error handlers on an application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
