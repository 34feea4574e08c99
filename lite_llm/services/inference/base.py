from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable

from lite_llm.schemas.models import GenerateResult, ModelRecord, PullProgress


class InferenceBackend(ABC):
    @abstractmethod
    async def health(self) -> None:
        """Raise unless the backend answers its version endpoint with 200."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if backend is responsive."""
        ...

    @abstractmethod
    async def list_models(self) -> list[ModelRecord]:
        """List installed models."""
        ...

    @abstractmethod
    def iter_pull(self, name: str) -> AsyncIterator[PullProgress]:
        """Stream pull progress events until the pull completes."""
        ...

    @abstractmethod
    async def pull_model(self, name: str, progress: Callable[[PullProgress], None] | None = None) -> None:
        """Pull a model, handing each progress event to ``progress``."""
        ...

    @abstractmethod
    async def delete_model(self, name: str) -> None:
        """Delete an installed model."""
        ...

    @abstractmethod
    async def generate(self, model: str, prompt: str, options: dict | None = None) -> GenerateResult:
        """One-shot, non-streaming generation."""
        ...
