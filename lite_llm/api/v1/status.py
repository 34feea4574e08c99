from fastapi import APIRouter, Depends

from lite_llm.config import settings
from lite_llm.dependencies import get_hardware_prober, get_inference_backend, get_metrics_sampler
from lite_llm.schemas.hardware import HardwareProfile
from lite_llm.schemas.metrics import UtilizationSample
from lite_llm.schemas.status import StatusReport
from lite_llm.services.hardware import HardwareProber
from lite_llm.services.inference.ollama_client import OllamaClient
from lite_llm.services.metrics import MetricsSampler
from lite_llm.services.status import collect_status

router = APIRouter()


@router.get("/api/status")
async def status(
    prober: HardwareProber = Depends(get_hardware_prober),
    sampler: MetricsSampler = Depends(get_metrics_sampler),
    backend: OllamaClient = Depends(get_inference_backend),
) -> StatusReport:
    """Hardware, utilization, Ollama, and web interface status in one report."""
    return await collect_status(prober, sampler, backend, web_urls=settings.web_urls)


@router.get("/api/system/hardware")
async def hardware(prober: HardwareProber = Depends(get_hardware_prober)) -> HardwareProfile:
    return await prober.probe()


@router.get("/api/system/metrics")
async def metrics(sampler: MetricsSampler = Depends(get_metrics_sampler)) -> UtilizationSample:
    return await sampler.sample()
