"""Utilization sampler over /proc and /sys.

Each metric degrades on its own: a read failure is logged and leaves that
metric at zero (or the -1 GPU sentinel) while the others are still reported.

CPU usage is the busy share of all CPU time since boot, read from a single
/proc/stat snapshot. It moves slowly on a long-running host. A true live rate
would need two reads and retained state between samples, which this sampler
deliberately doesn't keep.
"""

import os
from datetime import datetime, timezone
from pathlib import Path

import structlog

from lite_llm.config import settings
from lite_llm.schemas.metrics import GPU_UNAVAILABLE, UtilizationSample
from lite_llm.services import parsers

logger = structlog.get_logger()

GPU_BUSY_FILES = ("gpu_busy_percent", "busy_percent")


class MetricsSampler:
    def __init__(self, proc_root: str | None = None, sys_root: str | None = None):
        self._proc_root = Path(proc_root or settings.lite_llm_proc_root)
        self._sys_root = Path(sys_root or settings.lite_llm_sys_root)

    async def sample(self) -> UtilizationSample:
        timestamp = datetime.now(timezone.utc)

        cpu_percent = 0.0
        try:
            cpu_percent = self.cpu_percent()
        except (OSError, ValueError, IndexError) as e:
            logger.warning("cpu_usage_unavailable", reason=str(e))

        mem_used = mem_total = 0
        try:
            mem_used, mem_total = self.memory_usage_mb()
        except OSError as e:
            logger.warning("memory_usage_unavailable", reason=str(e))
        mem_percent = mem_used / mem_total * 100 if mem_total > 0 else 0.0

        gpu_percent, gpu_used, gpu_total = self.gpu_usage()

        return UtilizationSample(
            cpu_percent=cpu_percent,
            memory_used_mb=mem_used,
            memory_total_mb=mem_total,
            memory_percent=mem_percent,
            gpu_percent=gpu_percent,
            gpu_memory_used_mb=gpu_used,
            gpu_memory_total_mb=gpu_total,
            timestamp=timestamp,
        )

    def cpu_percent(self) -> float:
        return parsers.cpu_usage_percent((self._proc_root / "stat").read_text())

    def memory_usage_mb(self) -> tuple[int, int]:
        return parsers.memory_usage_mb((self._proc_root / "meminfo").read_text())

    def _first_card_device(self) -> Path | None:
        drm_dir = self._sys_root / "class" / "drm"
        try:
            cards = parsers.drm_card_names(os.listdir(drm_dir))
        except OSError:
            return None
        return drm_dir / cards[0] / "device" if cards else None

    def gpu_usage(self) -> tuple[float, int, int]:
        """Return ``(percent, used_mb, total_mb)`` for the first AMD card.

        Without a readable VRAM total the whole metric is unavailable. With one,
        memory is reported even if neither busy-percent file can be read.
        """
        device = self._first_card_device()
        if device is None:
            return GPU_UNAVAILABLE, 0, 0

        total_bytes = _read_int(device / "mem_info_vram_total")
        if not total_bytes:
            return GPU_UNAVAILABLE, 0, 0
        used_bytes = _read_int(device / "mem_info_vram_used") or 0

        percent = GPU_UNAVAILABLE
        for name in GPU_BUSY_FILES:
            try:
                percent = float((device / name).read_text().strip())
                break
            except (OSError, ValueError):
                continue
        else:
            logger.debug("gpu_busy_percent_unavailable", device=str(device))

        return percent, parsers.bytes_to_mb(used_bytes), parsers.bytes_to_mb(total_bytes)


def _read_int(path: Path) -> int | None:
    try:
        return parsers.parse_sysfs_int(path.read_text())
    except (OSError, ValueError):
        return None
