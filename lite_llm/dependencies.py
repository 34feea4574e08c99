from fastapi import Request

from lite_llm.services.hardware import HardwareProber
from lite_llm.services.inference.ollama_client import OllamaClient
from lite_llm.services.metrics import MetricsSampler


def get_inference_backend(request: Request) -> OllamaClient:
    """Return the Ollama client stored on app state during lifespan."""
    return request.app.state.inference_backend


def get_hardware_prober() -> HardwareProber:
    return HardwareProber()


def get_metrics_sampler() -> MetricsSampler:
    return MetricsSampler()
