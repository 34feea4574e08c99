"""Status aggregation: probe, sample, query, and render one combined report."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
import structlog
from rich.console import Console
from rich.table import Table

from lite_llm.core.exceptions import BackendUnavailableError, LiteLLMError
from lite_llm.schemas.status import InferenceStatus, StatusReport, WebInterfaceStatus
from lite_llm.services.hardware import HardwareProber
from lite_llm.services.inference.ollama_client import OllamaClient
from lite_llm.services.metrics import MetricsSampler

logger = structlog.get_logger()

WEB_CHECK_TIMEOUT = 5.0


@dataclass(frozen=True)
class WatchConfig:
    interval_seconds: float = 5.0
    clear_screen: bool = True


async def check_web_interface(url: str, http_client: httpx.AsyncClient | None = None) -> bool:
    """True when ``url`` answers a GET with 200."""
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=WEB_CHECK_TIMEOUT)
    try:
        response = await client.get(url)
        return response.status_code == 200
    except httpx.HTTPError:
        return False
    finally:
        if owns_client:
            await client.aclose()


async def query_inference(backend: OllamaClient) -> InferenceStatus:
    status = InferenceStatus(endpoint=backend.base_url, reachable=False)
    try:
        await backend.health()
    except BackendUnavailableError as e:
        status.error = e.message
        return status

    status.reachable = True
    try:
        status.models = await backend.list_models()
    except LiteLLMError as e:
        status.models_error = e.message
    return status


async def collect_status(
    prober: HardwareProber,
    sampler: MetricsSampler,
    backend: OllamaClient,
    web_urls: list[str] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> StatusReport:
    """Run every check in sequence and merge the results. Never raises for a failed check."""
    timestamp = datetime.now(timezone.utc)
    hardware = await prober.probe()
    utilization = await sampler.sample()
    inference = await query_inference(backend)

    web = []
    for url in web_urls or []:
        web.append(WebInterfaceStatus(url=url, reachable=await check_web_interface(url, http_client)))

    return StatusReport(
        timestamp=timestamp,
        hardware=hardware,
        utilization=utilization,
        inference=inference,
        web_interfaces=web,
    )


def _mark(ok: bool) -> str:
    return "[green]✓ Running[/green]" if ok else "[red]✗ Not Running[/red]"


def _yes(ok: bool) -> str:
    return "[green]✓[/green]" if ok else "[red]✗[/red]"


def render_status(report: StatusReport, console: Console) -> None:
    console.print(f"[bold]Lite LLM Status[/bold]  [dim]{report.timestamp:%Y-%m-%d %H:%M:%S} UTC[/dim]\n")

    hw = report.hardware
    system = Table(title="System", show_header=False, title_justify="left")
    system.add_column("Item", style="cyan")
    system.add_column("Value")
    system.add_row("Kernel", hw.kernel_version)
    system.add_row("Docker", _yes(hw.has_container_runtime))
    system.add_row("GPU", hw.gpu_vendor if hw.gpu_vendor != "unknown" else "[yellow]not detected[/yellow]")
    if hw.gpu_vendor != "unknown":
        system.add_row("  Model", hw.gpu_model or "—")
        system.add_row("  Memory", f"{hw.gpu_memory_mb} MB")
    if hw.gpu_vendor == "amd":
        system.add_row("ROCm", _yes(hw.has_vendor_accel_stack))
    system.add_row("System Memory", f"{hw.system_memory_mb} MB")
    console.print(system)

    inf = report.inference
    service = Table(title="Ollama", show_header=False, title_justify="left")
    service.add_column("Item", style="cyan")
    service.add_column("Value")
    service.add_row("API", _mark(inf.reachable))
    service.add_row("Endpoint", inf.endpoint)
    if inf.error:
        service.add_row("Error", f"[red]{inf.error}[/red]")
    elif inf.models_error:
        service.add_row("Models", f"[red]Failed to list ({inf.models_error})[/red]")
    elif inf.reachable:
        service.add_row("Models", f"{len(inf.models)} installed")
        for model in inf.models:
            service.add_row("", f"{model.name} ({model.size_gb:.1f} GB)")
    console.print(service)

    if report.web_interfaces:
        web = Table(title="Web Interfaces", show_header=False, title_justify="left")
        web.add_column("URL", style="cyan")
        web.add_column("Status")
        for iface in report.web_interfaces:
            web.add_row(iface.url, _mark(iface.reachable))
        console.print(web)

    util = report.utilization
    perf = Table(title="Performance", show_header=False, title_justify="left")
    perf.add_column("Metric", style="cyan")
    perf.add_column("Value")
    perf.add_row("CPU Usage", f"{util.cpu_percent:.1f}% [dim](since boot)[/dim]")
    perf.add_row(
        "Memory Usage",
        f"{util.memory_percent:.1f}% ({util.memory_used_mb} MB / {util.memory_total_mb} MB)",
    )
    if util.gpu_available:
        perf.add_row("GPU Usage", f"{util.gpu_percent:.1f}%")
    else:
        perf.add_row("GPU Usage", "[dim]unavailable[/dim]")
    if util.gpu_memory_total_mb:
        perf.add_row("GPU Memory", f"{util.gpu_memory_used_mb} MB / {util.gpu_memory_total_mb} MB")
    console.print(perf)


async def watch_status(
    config: WatchConfig,
    collect: Callable[[], Awaitable[StatusReport]],
    render: Callable[[StatusReport], None],
    console: Console | None = None,
    max_cycles: int | None = None,
) -> None:
    """Collect and render on a fixed interval until cancelled.

    Cycles aren't overlap-protected: a cycle slower than the interval simply
    delays the next one. A failed cycle is logged and the loop continues.
    """
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        if config.clear_screen and console is not None:
            console.clear()
        try:
            render(await collect())
        except Exception:
            logger.exception("status_cycle_failed")
        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            break
        await asyncio.sleep(config.interval_seconds)
