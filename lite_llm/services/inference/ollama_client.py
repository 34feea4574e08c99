import json
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing, asynccontextmanager

import httpx
import pydantic
import structlog

from lite_llm.core.exceptions import BackendDecodeError, BackendStatusError, BackendUnavailableError
from lite_llm.schemas.models import GenerateResult, ModelListResponse, ModelRecord, PullProgress
from lite_llm.services.inference.base import InferenceBackend

logger = structlog.get_logger()

PULL_SUCCESS = "success"


def _default_timeout() -> httpx.Timeout:
    # Generous read timeout: model transfers and first-token latency run to minutes.
    return httpx.Timeout(connect=5.0, read=300.0, write=300.0, pool=300.0)


class OllamaClient(InferenceBackend):
    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout or _default_timeout())

    # ── Health ───────────────────────────────────────────────────────────────

    async def health(self) -> None:
        """Raise BackendUnavailableError unless GET /api/version answers 200."""
        async with self._errors("health check"):
            response = await self._client.get(f"{self.base_url}/api/version")
        if response.status_code != 200:
            raise BackendStatusError(
                response.status_code, f"Health check failed with status: {response.status_code}"
            )

    async def health_check(self) -> bool:
        try:
            await self.health()
        except BackendUnavailableError as e:
            logger.debug("ollama_health_failed", base_url=self.base_url, reason=e.message)
            return False
        return True

    # ── Models ───────────────────────────────────────────────────────────────

    async def list_models(self) -> list[ModelRecord]:
        async with self._errors("list models"):
            response = await self._client.get(f"{self.base_url}/api/tags")
        self._raise_for_status(response)
        try:
            return ModelListResponse.model_validate(response.json()).models
        except ValueError as e:  # JSONDecodeError, UnicodeDecodeError, ValidationError
            raise BackendDecodeError(f"Failed to decode model list: {e}")

    async def delete_model(self, name: str) -> None:
        async with self._errors("delete model"):
            # httpx only accepts a body on DELETE through the generic request()
            response = await self._client.request(
                "DELETE", f"{self.base_url}/api/delete", json={"name": name}
            )
        if response.status_code != 200:
            raise BackendStatusError(
                response.status_code, f"Delete request failed with status: {response.status_code}"
            )
        logger.info("model_deleted", model=name)

    async def iter_pull(self, name: str) -> AsyncIterator[PullProgress]:
        """Stream /api/pull progress, one event per NDJSON line.

        Stops after the ``"success"`` event, or at end of stream. A stream that
        ends without ``"success"`` is treated as finished. The response is
        closed on every exit, including when the consumer stops early or the
        task is cancelled.
        """
        payload = {"name": name, "stream": True}
        async with self._errors("pull model"):
            async with self._client.stream("POST", f"{self.base_url}/api/pull", json=payload) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise BackendStatusError(response.status_code, _error_text(response))

                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    event = _decode_progress(line)
                    yield event
                    if event.status == PULL_SUCCESS:
                        return

        logger.warning("pull_stream_ended_without_success", model=name)

    async def pull_model(self, name: str, progress: Callable[[PullProgress], None] | None = None) -> None:
        """Pull ``name``, calling ``progress`` with each event before reading the next."""
        logger.info("model_pull_started", model=name)
        # Releases the response as soon as the sink raises.
        async with aclosing(self.iter_pull(name)) as events:
            async for event in events:
                if progress is not None:
                    progress(event)
        logger.info("model_pull_finished", model=name)

    # ── Generation ───────────────────────────────────────────────────────────

    async def generate(self, model: str, prompt: str, options: dict | None = None) -> GenerateResult:
        payload: dict = {"model": model, "prompt": prompt, "stream": False}
        if options:
            payload["options"] = options

        async with self._errors("generate"):
            response = await self._client.post(f"{self.base_url}/api/generate", json=payload)
        self._raise_for_status(response)
        try:
            return GenerateResult.model_validate(response.json())
        except ValueError as e:
            raise BackendDecodeError(f"Failed to decode generate response: {e}")

    async def close(self):
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ── Helpers ──────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def _errors(self, operation: str):
        """Translate httpx transport failures into BackendUnavailableError."""
        try:
            yield
        except httpx.TimeoutException as e:
            raise BackendUnavailableError(f"Ollama {operation} timed out.") from e
        except httpx.TransportError as e:
            raise BackendUnavailableError(f"Cannot connect to Ollama at {self.base_url}: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code != 200:
            raise BackendStatusError(response.status_code, _error_text(response))


def _decode_progress(line: str) -> PullProgress:
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise BackendDecodeError(f"Failed to decode progress: {e}")
    if not isinstance(data, dict):
        raise BackendDecodeError(f"Failed to decode progress: expected an object, got {line!r}")
    if "error" in data:
        raise BackendStatusError(200, f"Pull failed: {data['error']}")
    try:
        return PullProgress.model_validate(data)
    except pydantic.ValidationError as e:
        raise BackendDecodeError(f"Failed to decode progress: {e}")


def _error_text(response: httpx.Response) -> str:
    """Best-effort error message from an Ollama error body (``{"error": "..."}``)."""
    try:
        detail = response.json().get("error")
    except (ValueError, AttributeError):
        detail = None
    if detail:
        return f"Ollama returned {response.status_code}: {detail}"
    return f"Ollama returned error: {response.status_code}"
