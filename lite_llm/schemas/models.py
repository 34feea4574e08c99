from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ModelRecord(BaseModel):
    """A model installed on the Ollama server, as reported by /api/tags."""

    name: str
    size_bytes: int = Field(0, alias="size")
    modified_at: datetime | None = None
    digest: str | None = None
    details: dict | None = None

    model_config = {"populate_by_name": True}

    @property
    def size_gb(self) -> float:
        return self.size_bytes / (1024**3)


class ModelListResponse(BaseModel):
    models: list[ModelRecord] = []

    @field_validator("models", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        # An empty registry may answer {"models": null}.
        return [] if value is None else value


class PullProgress(BaseModel):
    """One decoded line of a streamed /api/pull response."""

    status: str = ""
    digest: str | None = None
    total: int | None = None
    completed: int | None = None

    @property
    def percent(self) -> float | None:
        if self.total and self.total > 0:
            return (self.completed or 0) / self.total * 100
        return None


class GenerateResult(BaseModel):
    model: str = ""
    response: str = ""
    done: bool = False
    created_at: datetime | None = None
