from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lite_llm.api.v1.router import v1_router
from lite_llm.config import settings
from lite_llm.core.exceptions import LiteLLMError, lite_llm_error_handler
from lite_llm.core.logging import configure_logging
from lite_llm.core.middleware import RequestLoggingMiddleware
from lite_llm.services.inference.ollama_client import OllamaClient

configure_logging(settings.lite_llm_log_level)

logger = structlog.get_logger()


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.lite_llm_http_connect_timeout,
            read=settings.lite_llm_http_read_timeout,
            write=settings.lite_llm_http_read_timeout,
            pool=settings.lite_llm_http_read_timeout,
        )
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    backend = OllamaClient(base_url=settings.ollama_base_url, http_client=build_http_client())
    app.state.inference_backend = backend

    logger.info("lite_llm_starting", ollama_url=settings.ollama_base_url)
    yield

    await backend.close()
    logger.info("lite_llm_stopping")


app = FastAPI(
    title="Lite LLM",
    description="Status and model management for a local Ollama inference host",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(LiteLLMError, lite_llm_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.lite_llm_cors_origins.split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(v1_router)


@app.get("/")
async def root():
    return {"service": "lite-llm", "version": "0.1.0"}
