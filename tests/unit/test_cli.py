import httpx
import pytest
from httpx import ASGITransport
from typer.testing import CliRunner

from lite_llm import cli
from lite_llm.core.logging import configure_logging
from lite_llm.services import hardware
from lite_llm.services.inference.ollama_client import OllamaClient
from tests.fixtures.fakes import FakeRunner, add_drm_card, ok
from tests.fixtures.hardware import LSMOD_AMDGPU, LSPCI_AMD, LSPCI_INTEL_ONLY
from tests.mocks.fake_ollama import app as fake_ollama_app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI callback points structlog at the runner's captured stderr."""
    yield
    configure_logging()


@pytest.fixture
def fake_backend(monkeypatch):
    """Point CLI commands at the fake Ollama; each command gets a fresh client."""

    def factory():
        client = httpx.AsyncClient(transport=ASGITransport(app=fake_ollama_app), base_url="http://fake-ollama")
        return OllamaClient(base_url="http://fake-ollama", http_client=client)

    monkeypatch.setattr(cli, "_client", factory)


@pytest.fixture
def fake_prober(monkeypatch, proc_root, sys_root):
    def install(responses):
        real_prober = hardware.HardwareProber

        def factory():
            return real_prober(
                runner=FakeRunner(responses),
                proc_root=str(proc_root),
                sys_root=str(sys_root),
                rocminfo_paths=(),
            )

        monkeypatch.setattr(hardware, "HardwareProber", factory)

    return install


def test_models_list(fake_backend):
    result = runner.invoke(cli.cli_app, ["models", "list"])
    assert result.exit_code == 0
    assert "llama3.1:8b (4.1 GB)" in result.output


def test_models_download(fake_backend):
    result = runner.invoke(cli.cli_app, ["models", "download", "llama3.1:8b"])
    assert result.exit_code == 0
    assert "Successfully downloaded model: llama3.1:8b" in result.output


def test_models_download_failure(fake_backend):
    result = runner.invoke(cli.cli_app, ["models", "download", "missing:model"])
    assert result.exit_code == 1
    assert "Failed to download model" in result.output


def test_models_remove(fake_backend):
    result = runner.invoke(cli.cli_app, ["models", "remove", "mistral:7b"])
    assert result.exit_code == 0

    result = runner.invoke(cli.cli_app, ["models", "remove", "nope:1b"])
    assert result.exit_code == 1
    assert "Delete request failed with status: 404" in result.output


def test_models_recommended_continues_after_failure(fake_backend, monkeypatch):
    monkeypatch.setattr(cli.settings, "lite_llm_recommended_models", "failing:model,llama3.1:8b")
    result = runner.invoke(cli.cli_app, ["models", "recommended"])
    assert result.exit_code == 1
    assert "Failed to download failing:model" in result.output
    assert "Successfully downloaded llama3.1:8b" in result.output
    assert "1 failure(s): failing:model" in result.output


def test_check_passes_on_amd_host(fake_prober, sys_root):
    add_drm_card(sys_root, "card0", vram_total=8 * 1024**3)
    fake_prober({
        ("docker", "--version"): ok("Docker version 24.0.7\n"),
        ("lspci", "-v"): ok(LSPCI_AMD),
        ("lsmod",): ok(LSMOD_AMDGPU),
        ("uname", "-r"): ok("6.1.0\n"),
    })
    result = runner.invoke(cli.cli_app, ["check"])
    assert result.exit_code == 0
    assert "GPU Type: amd" in result.output
    assert "All requirements met." in result.output


def test_check_reports_every_violation(fake_prober):
    fake_prober({("lspci", "-v"): ok(LSPCI_INTEL_ONLY)})
    result = runner.invoke(cli.cli_app, ["check"])
    assert result.exit_code == 1
    assert "system requirements not met:" in result.output
    assert "Docker is not installed or not accessible" in result.output
    assert "No supported GPU detected (NVIDIA or AMD)" in result.output


def test_status_once(fake_backend, fake_prober, monkeypatch):
    from lite_llm.services import metrics

    monkeypatch.setattr(cli.settings, "lite_llm_web_urls", "")
    fake_prober({})
    monkeypatch.setattr(metrics.settings, "lite_llm_proc_root", "/nonexistent-proc")
    result = runner.invoke(cli.cli_app, ["status"])
    assert result.exit_code == 0
    assert "Ollama" in result.output
    assert "Performance" in result.output
