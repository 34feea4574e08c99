import structlog
from fastapi import APIRouter, Depends

from lite_llm.core.exceptions import LiteLLMError
from lite_llm.dependencies import get_inference_backend
from lite_llm.schemas.chat import ChatMessage, ChatRequest, ChatResponse
from lite_llm.services.inference.ollama_client import OllamaClient

router = APIRouter()
logger = structlog.get_logger()

_ROLE_PREFIX = {"user": "User", "assistant": "Assistant"}


def build_prompt(messages: list[ChatMessage]) -> str:
    """Flatten a conversation into a plain-text transcript for /api/generate."""
    lines = []
    for message in messages:
        prefix = _ROLE_PREFIX.get(message.role)
        if prefix:
            lines.append(f"{prefix}: {message.content}\n")
    return "".join(lines)


@router.post("/api/chat")
async def chat(
    request: ChatRequest,
    backend: OllamaClient = Depends(get_inference_backend),
) -> ChatResponse:
    """Single-turn reply to a conversation, generated without streaming."""
    if not request.messages:
        raise LiteLLMError(code="invalid_request", message="No messages provided", status=400)

    result = await backend.generate(request.model, build_prompt(request.messages))
    logger.debug("chat_generated", model=request.model, done=result.done)
    return ChatResponse(
        message=ChatMessage(role="assistant", content=result.response),
        done=result.done,
    )
