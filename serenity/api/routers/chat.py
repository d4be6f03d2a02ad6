from collections.abc import AsyncIterator, Mapping, Sequence
import logging

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from serenity.api.schemas.chat import ChatRequest
from serenity.core.settings import Settings
from serenity.dependency_injection import get_container
from serenity.services.contracts import GatewayClientProtocol
from serenity.streaming.transport import CannedResponseTransport

logger = logging.getLogger(__name__)
router = APIRouter(tags=["chat"])

_SSE_HEADERS = {"Cache-Control": "no-cache"}


async def _canned_stream(transport: CannedResponseTransport, messages: Sequence[Mapping[str, str]]) -> AsyncIterator[bytes | str]:
    async with transport.open(messages) as response:
        if response.chunks is None:
            return
        async for chunk in response.chunks:
            yield chunk


@router.post(
    "/chat",
    summary="Stream an assistant reply as server-sent events",
    description=(
        "Forwards the conversation to the LLM gateway and relays its chat-completion chunks as "
        "`data:` records ending with `data: [DONE]`. Falls back to the canned responder when no "
        "gateway key is configured."
    ),
)
async def chat(payload: ChatRequest, request: Request) -> StreamingResponse:
    container = get_container(request)
    settings = container.resolve(Settings)
    messages = [message.model_dump() for message in payload.messages]
    logger.info(
        "chat stream request",
        extra={"messages_count": len(messages), "canned": settings.use_canned_responder},
    )

    if settings.use_canned_responder:
        body = _canned_stream(container.resolve(CannedResponseTransport), messages)
        return StreamingResponse(body, media_type="text/event-stream", headers=_SSE_HEADERS)

    # Status errors surface here as JSON responses, before any event is streamed.
    gateway: GatewayClientProtocol = container.resolve(GatewayClientProtocol)
    stream = await gateway.open_chat_stream(messages)
    return StreamingResponse(
        stream.iter_bytes(),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
        background=BackgroundTask(stream.aclose),
    )
