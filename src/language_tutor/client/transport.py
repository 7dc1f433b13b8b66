"""HTTP transport from the tutor client to the gateway."""

from typing import TypeVar

import httpx
import structlog
from pydantic import ValidationError

from language_tutor.models.result import Err, ErrorKind, Ok
from language_tutor.models.tutor import (
    AssessmentRequest,
    ChatRequest,
    CompletionRequest,
    ProficiencyAnalysis,
    TutorReply,
    WireModel,
)

logger = structlog.get_logger()

M = TypeVar("M", bound=WireModel)

_KIND_BY_STATUS = {
    400: ErrorKind.INVALID_REQUEST,
    405: ErrorKind.METHOD_NOT_ALLOWED,
}


class GatewayTransport:
    """Posts requests to the gateway and returns ``Ok`` or ``Err``, never raising.

    Args:
        base_url: Gateway root URL.
        timeout: Seconds before a request is abandoned.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def chat(self, request: ChatRequest) -> Ok[TutorReply] | Err:
        return await self._post("/api/chat", request, TutorReply)

    async def complete(self, request: CompletionRequest) -> Ok[TutorReply] | Err:
        return await self._post("/api/complete", request, TutorReply)

    async def assess(self, request: AssessmentRequest) -> Ok[ProficiencyAnalysis] | Err:
        return await self._post("/api/assess", request, ProficiencyAnalysis)

    async def _post(self, path: str, body: WireModel, reply_model: type[M]) -> Ok[M] | Err:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(path, json=body.to_wire())
        except httpx.HTTPError as exc:
            logger.warning("gateway_unreachable", path=path, error=repr(exc))
            return Err(ErrorKind.TRANSPORT, "Gateway unreachable", details=repr(exc))

        if not response.is_success:
            logger.warning("gateway_error_status", path=path, status=response.status_code)
            return Err(
                _KIND_BY_STATUS.get(response.status_code, ErrorKind.UPSTREAM),
                _error_message(response),
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning("gateway_reply_not_json", path=path)
            return Err(ErrorKind.TRANSPORT, "Malformed gateway response")

        try:
            return Ok(reply_model.model_validate(data))
        except ValidationError as exc:
            logger.warning("gateway_reply_shape_invalid", path=path, errors=exc.error_count())
            return Err(ErrorKind.TRANSPORT, "Unexpected gateway response shape", details=str(exc))


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return f"Gateway returned HTTP {response.status_code}"
