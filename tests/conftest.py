import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from lite_llm.services.inference.ollama_client import OllamaClient
from tests.fixtures.fakes import FakeRunner, write_file
from tests.fixtures.hardware import MEMINFO, PROC_STAT


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def proc_root(tmp_path):
    """A /proc tree with stat and meminfo."""
    root = tmp_path / "proc"
    write_file(root / "stat", PROC_STAT)
    write_file(root / "meminfo", MEMINFO)
    return root


@pytest.fixture
def sys_root(tmp_path):
    """An empty /sys tree; tests add DRM cards as needed."""
    root = tmp_path / "sys"
    (root / "class" / "drm").mkdir(parents=True)
    return root


@pytest_asyncio.fixture
async def ollama_client():
    """OllamaClient wired to the in-process fake Ollama server."""
    from tests.mocks.fake_ollama import app as fake_ollama_app

    transport = ASGITransport(app=fake_ollama_app)
    client = httpx.AsyncClient(transport=transport, base_url="http://fake-ollama")
    backend = OllamaClient(base_url="http://fake-ollama", http_client=client)
    yield backend
    await client.aclose()


@pytest_asyncio.fixture
async def app_client(ollama_client, proc_root, sys_root, monkeypatch):
    """API client for lite_llm.main:app, backed by the fake Ollama and fixture filesystems."""
    from lite_llm.config import settings
    from lite_llm.dependencies import get_hardware_prober, get_metrics_sampler
    from lite_llm.main import app
    from lite_llm.services.hardware import HardwareProber
    from lite_llm.services.metrics import MetricsSampler

    # No real web UIs are probed from tests.
    monkeypatch.setattr(settings, "lite_llm_web_urls", "")

    app.state.inference_backend = ollama_client
    app.dependency_overrides[get_hardware_prober] = lambda: HardwareProber(
        runner=FakeRunner(), proc_root=str(proc_root), sys_root=str(sys_root), rocminfo_paths=()
    )
    app.dependency_overrides[get_metrics_sampler] = lambda: MetricsSampler(
        proc_root=str(proc_root), sys_root=str(sys_root)
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
