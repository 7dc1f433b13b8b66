"""REST API routes for the tutor gateway."""

import structlog
from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

from language_tutor.config import get_settings
from language_tutor.gateway.handler import TutorGateway
from language_tutor.gateway.upstream import build_completion_client
from language_tutor.models.result import Err, Ok
from language_tutor.models.tutor import (
    AssessmentRequest,
    ChatRequest,
    CompletionRequest,
    WireModel,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def get_gateway() -> TutorGateway:
    """Build a gateway for one request from the current settings."""
    return TutorGateway(build_completion_client(get_settings()))


def _respond(result: Ok[WireModel] | Err) -> JSONResponse:
    if isinstance(result, Err):
        logger.info("request_rejected", kind=result.kind.value, error=result.message)
        return JSONResponse(
            result.to_body(), status_code=result.kind.status_code, headers=CORS_HEADERS
        )
    return JSONResponse(result.value.to_wire(), headers=CORS_HEADERS)


@router.post("/chat")
async def chat(body: ChatRequest) -> JSONResponse:
    """Answer one learner message with a TutorReply."""
    gateway = get_gateway()
    return _respond(await gateway.chat(body))


@router.post("/complete")
async def complete(body: CompletionRequest) -> JSONResponse:
    """Forward a free-text prompt and normalise the answer into a TutorReply."""
    gateway = get_gateway()
    return _respond(await gateway.complete(body))


@router.post("/assess")
async def assess(body: AssessmentRequest) -> JSONResponse:
    """Assess the learner's proficiency over a conversation."""
    gateway = get_gateway()
    return _respond(await gateway.assess(body))


@router.options("/chat")
@router.options("/complete")
@router.options("/assess")
async def preflight() -> Response:
    """Acknowledge cross-origin preflight requests with an empty body."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
