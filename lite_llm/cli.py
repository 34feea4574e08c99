import asyncio

import typer
from rich.console import Console
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn, TransferSpeedColumn

from lite_llm.config import settings
from lite_llm.core.exceptions import LiteLLMError, RequirementsNotMetError
from lite_llm.core.logging import configure_logging
from lite_llm.schemas.models import PullProgress

console = Console()
cli_app = typer.Typer(name="lite-llm", help="LLM management tool for GPU homelab deployments")
models_app = typer.Typer(help="Manage LLM models")
cli_app.add_typer(models_app, name="models")


def _run_async(coro):
    """Run async code from sync CLI context."""
    return asyncio.run(coro)


def _client():
    from lite_llm.services.inference.ollama_client import OllamaClient

    return OllamaClient(base_url=settings.ollama_base_url)


@cli_app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    configure_logging("debug" if verbose else settings.lite_llm_log_level, json_output=False)


# ── Status ───────────────────────────────────────────────────────────────────


@cli_app.command("status")
def status(
    watch: bool = typer.Option(False, "--watch", "-w", help="Watch status continuously"),
    interval: int = typer.Option(
        settings.lite_llm_status_interval, "--interval", "-i", help="Update interval in seconds (when watching)"
    ),
):
    """Check system and service status."""
    from lite_llm.services.hardware import HardwareProber
    from lite_llm.services.metrics import MetricsSampler
    from lite_llm.services.status import WatchConfig, collect_status, render_status, watch_status

    async def _collect():
        client = _client()
        try:
            return await collect_status(HardwareProber(), MetricsSampler(), client, web_urls=settings.web_urls)
        finally:
            await client.close()

    if not watch:
        render_status(_run_async(_collect()), console)
        return

    console.print(f"[dim]Watching status (updating every {interval} seconds, press Ctrl+C to stop)[/dim]")
    config = WatchConfig(interval_seconds=interval)
    try:
        _run_async(watch_status(config, _collect, lambda report: render_status(report, console), console=console))
    except KeyboardInterrupt:
        raise typer.Exit(code=0)


@cli_app.command("check")
def check():
    """Verify the host meets the hardware requirements for local inference."""
    from lite_llm.services.hardware import HardwareProber
    from lite_llm.services.requirements import validate_requirements

    async def _probe():
        prober = HardwareProber()
        profile = await prober.probe()
        passthrough = None
        if profile.gpu_vendor == "nvidia" and profile.has_container_runtime:
            passthrough = await prober.check_gpu_passthrough()
        return profile, passthrough

    profile, passthrough = _run_async(_probe())

    console.print("[bold]=== System Information ===[/bold]")
    console.print(f"  Kernel Version: {profile.kernel_version}")
    console.print(f"  Docker: {profile.has_container_runtime}")
    console.print(f"  GPU Type: {profile.gpu_vendor}")
    if profile.gpu_vendor != "unknown":
        console.print(f"  GPU Model: {profile.gpu_model}")
        console.print(f"  GPU Memory: {profile.gpu_memory_mb} MB")
    if profile.gpu_vendor == "amd":
        console.print(f"  ROCm: {profile.has_vendor_accel_stack}")
    console.print(f"  System Memory: {profile.system_memory_mb} MB")

    try:
        warnings = validate_requirements(profile, gpu_passthrough=passthrough)
    except RequirementsNotMetError as e:
        console.print(f"\n[bold red]{e.message}[/bold red]")
        raise typer.Exit(code=1)

    for warning in warnings:
        console.print(f"[yellow]{warning}[/yellow]")
    console.print("\n[bold green]All requirements met.[/bold green]")


# ── Models ───────────────────────────────────────────────────────────────────


@models_app.command("list")
def list_models():
    """List installed models."""

    async def _list():
        client = _client()
        try:
            return await client.list_models()
        finally:
            await client.close()

    try:
        models = _run_async(_list())
    except LiteLLMError as e:
        console.print(f"[red]Failed to list models: {e.message}[/red]")
        raise typer.Exit(code=1)

    if not models:
        console.print("[dim]No models installed.[/dim]")
        console.print("[dim]Use 'lite-llm models recommended' to download recommended models.[/dim]")
        return

    console.print("Installed models:")
    for model in models:
        console.print(f"  - {model.name} ({model.size_gb:.1f} GB)")


async def _pull_with_progress(client, name: str) -> None:
    """Pull ``name`` and drive a rich progress bar from the streamed events."""
    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(name, total=None)

        def _on_event(event: PullProgress) -> None:
            if event.total:
                progress.update(task, total=event.total, completed=event.completed or 0,
                                description=f"{name}: {event.status}")
            else:
                progress.update(task, description=f"{name}: {event.status}")

        await client.pull_model(name, progress=_on_event)


@models_app.command("download")
def download_model(name: str = typer.Argument(help="Model name, e.g. llama3.1:8b")):
    """Download a model."""

    async def _download():
        client = _client()
        try:
            await _pull_with_progress(client, name)
        finally:
            await client.close()

    console.print(f"Downloading model: {name}")
    try:
        _run_async(_download())
    except LiteLLMError as e:
        console.print(f"[red]Failed to download model: {e.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[bold green]Successfully downloaded model: {name}[/bold green]")


@models_app.command("remove")
def remove_model(name: str = typer.Argument(help="Model name to remove")):
    """Remove a model."""

    async def _remove():
        client = _client()
        try:
            await client.delete_model(name)
        finally:
            await client.close()

    console.print(f"Removing model: {name}")
    try:
        _run_async(_remove())
    except LiteLLMError as e:
        console.print(f"[red]Failed to remove model: {e.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[bold green]Successfully removed model: {name}[/bold green]")


@models_app.command("recommended")
def download_recommended():
    """Download the recommended models for 8GB GPUs."""

    async def _download_all() -> list[str]:
        failed = []
        client = _client()
        try:
            for name in settings.recommended_models:
                console.print(f"Downloading {name}...")
                try:
                    await _pull_with_progress(client, name)
                except LiteLLMError as e:
                    console.print(f"[red]Failed to download {name}: {e.message}[/red]")
                    failed.append(name)
                    continue
                console.print(f"[green]✓ Successfully downloaded {name}[/green]")
        finally:
            await client.close()
        return failed

    failed = _run_async(_download_all())
    if failed:
        console.print(f"[yellow]Finished with {len(failed)} failure(s): {', '.join(failed)}[/yellow]")
        raise typer.Exit(code=1)
    console.print("[bold green]Recommended models download complete![/bold green]")


# ── Server ───────────────────────────────────────────────────────────────────


@cli_app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Host to bind to"),
    port: int = typer.Option(8080, "--port", "-p", help="Port to serve on"),
):
    """Start the status and chat API server."""
    import uvicorn

    console.print(f"Starting lite-llm API on {host}:{port}")
    uvicorn.run("lite_llm.main:app", host=host, port=port)


def main():
    cli_app()


if __name__ == "__main__":
    main()
