from fastapi import APIRouter, Depends

from lite_llm.dependencies import get_inference_backend
from lite_llm.schemas.models import ModelListResponse
from lite_llm.services.inference.ollama_client import OllamaClient

router = APIRouter()


@router.get("/api/models")
async def list_models(backend: OllamaClient = Depends(get_inference_backend)) -> ModelListResponse:
    """Installed models as reported by Ollama."""
    models = await backend.list_models()
    return ModelListResponse(models=models)
