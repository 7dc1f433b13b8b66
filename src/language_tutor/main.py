"""FastAPI application entry point."""

import uuid

import structlog
import uvicorn
from fastapi import FastAPI, Request

from language_tutor.api.errors import install_error_handlers
from language_tutor.api.routes import router
from language_tutor.config import get_settings
from language_tutor.log_config import configure_logging

configure_logging()

logger = structlog.get_logger()
settings = get_settings()

app = FastAPI(title="Language Tutor Gateway", version="0.1.0")
install_error_handlers(app)
app.include_router(router)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind a request id to every log line emitted while handling the request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=str(uuid.uuid4()),
        method=request.method,
        path=request.url.path,
    )
    response = await call_next(request)
    logger.info("request_handled", status=response.status_code)
    return response


def main() -> None:
    """Run the application."""
    logger.info(
        "gateway_starting",
        provider=settings.upstream_provider,
        upstream_configured=bool(settings.upstream_api_key),
    )
    uvicorn.run(
        "language_tutor.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
