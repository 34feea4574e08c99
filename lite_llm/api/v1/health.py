from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lite_llm.core.exceptions import BackendUnavailableError
from lite_llm.dependencies import get_inference_backend
from lite_llm.services.inference.ollama_client import OllamaClient

router = APIRouter()


@router.get("/api/health")
async def health_check(backend: OllamaClient = Depends(get_inference_backend)) -> JSONResponse:
    """Ollama reachability check. 503 when the backend is down."""
    try:
        await backend.health()
    except BackendUnavailableError as e:
        return JSONResponse(status_code=503, content={"status": "unhealthy", "error": e.message})
    return JSONResponse(status_code=200, content={"status": "healthy"})
