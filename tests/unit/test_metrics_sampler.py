import pytest

from lite_llm.schemas.metrics import GPU_UNAVAILABLE
from lite_llm.services.metrics import MetricsSampler
from tests.fixtures.fakes import add_drm_card, write_file

GIB = 1024**3


def _sampler(proc_root, sys_root):
    return MetricsSampler(proc_root=str(proc_root), sys_root=str(sys_root))


async def test_cpu_and_memory(proc_root, sys_root):
    sample = await _sampler(proc_root, sys_root).sample()

    counters = [74608, 2520, 24433, 1117073, 6176, 4054, 0, 0, 0, 0]
    assert sample.cpu_percent == pytest.approx((sum(counters) - counters[3]) / sum(counters) * 100)
    assert sample.memory_total_mb == 32000
    assert sample.memory_used_mb == 17000
    assert sample.memory_percent == pytest.approx(17000 / 32000 * 100)
    assert sample.timestamp.tzinfo is not None


async def test_no_gpu_reports_sentinel(proc_root, sys_root):
    sample = await _sampler(proc_root, sys_root).sample()
    assert sample.gpu_percent == GPU_UNAVAILABLE
    assert sample.gpu_available is False
    assert sample.gpu_memory_used_mb == 0
    assert sample.gpu_memory_total_mb == 0


async def test_amd_gpu_metrics(proc_root, sys_root):
    add_drm_card(sys_root, "card0", vram_total=8 * GIB, vram_used=2 * GIB, busy_percent="37")
    sample = await _sampler(proc_root, sys_root).sample()
    assert sample.gpu_percent == 37.0
    assert sample.gpu_available is True
    assert sample.gpu_memory_used_mb == 2048
    assert sample.gpu_memory_total_mb == 8192


async def test_busy_percent_fallback_file(proc_root, sys_root):
    add_drm_card(sys_root, "card0", vram_total=8 * GIB, vram_used=0, busy_percent="5", busy_file="busy_percent")
    sample = await _sampler(proc_root, sys_root).sample()
    assert sample.gpu_percent == 5.0


async def test_idle_gpu_is_zero_not_sentinel(proc_root, sys_root):
    add_drm_card(sys_root, "card0", vram_total=8 * GIB, vram_used=0, busy_percent="0")
    sample = await _sampler(proc_root, sys_root).sample()
    assert sample.gpu_percent == 0.0
    assert sample.gpu_available is True


@pytest.mark.parametrize("vram_total", [None, 0])
async def test_missing_or_zero_vram_total_is_unavailable(proc_root, sys_root, vram_total):
    add_drm_card(sys_root, "card0", vram_total=vram_total, vram_used=GIB, busy_percent="50")
    sample = await _sampler(proc_root, sys_root).sample()
    assert sample.gpu_percent == GPU_UNAVAILABLE
    assert sample.gpu_memory_used_mb == 0
    assert sample.gpu_memory_total_mb == 0


async def test_memory_reported_without_busy_file(proc_root, sys_root):
    add_drm_card(sys_root, "card0", vram_total=4 * GIB, vram_used=GIB)
    sample = await _sampler(proc_root, sys_root).sample()
    assert sample.gpu_percent == GPU_UNAVAILABLE
    assert sample.gpu_memory_used_mb == 1024
    assert sample.gpu_memory_total_mb == 4096


async def test_first_card_in_numeric_order(proc_root, sys_root):
    add_drm_card(sys_root, "card10", vram_total=16 * GIB, vram_used=0, busy_percent="99")
    add_drm_card(sys_root, "card1", vram_total=4 * GIB, vram_used=0, busy_percent="10")
    sample = await _sampler(proc_root, sys_root).sample()
    assert sample.gpu_memory_total_mb == 4096
    assert sample.gpu_percent == 10.0


async def test_unreadable_proc_degrades_each_metric(tmp_path, sys_root):
    sample = await _sampler(tmp_path / "missing", sys_root).sample()
    assert sample.cpu_percent == 0.0
    assert sample.memory_used_mb == 0
    assert sample.memory_total_mb == 0
    assert sample.memory_percent == 0.0


async def test_malformed_stat_keeps_memory(tmp_path, sys_root):
    proc = tmp_path / "proc"
    write_file(proc / "stat", "cpu  garbage\n")
    write_file(proc / "meminfo", "MemTotal: 2048000 kB\nMemFree: 1024000 kB\n")
    sample = await _sampler(proc, sys_root).sample()
    assert sample.cpu_percent == 0.0
    assert sample.memory_total_mb == 2000
    assert sample.memory_used_mb == 1000
