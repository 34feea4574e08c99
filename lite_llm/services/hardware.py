"""Hardware prober: container runtime, GPU, vendor stack, memory and kernel facts.

Every sub-check degrades to a neutral value (False, 0, "unknown") and logs
why, so ``probe()`` always returns a complete profile.
"""

import os
from pathlib import Path

import structlog

from lite_llm.config import settings
from lite_llm.schemas.hardware import GpuMatch, HardwareProfile
from lite_llm.services import parsers
from lite_llm.services.commands import CommandRunner, run_command

logger = structlog.get_logger()

DEFAULT_GPU_MEMORY_MB = 8192  # assumed when detection fails (RX 570/580, RTX 3070 class)

ROCMINFO_PATHS = ("/opt/rocm/bin/rocminfo", "/usr/bin/rocminfo")
AMD_KERNEL_MODULE = "amdgpu"

CUDA_TEST_IMAGE = "nvidia/cuda:11.0-base"
PASSTHROUGH_TIMEOUT = 120.0


class HardwareProber:
    def __init__(
        self,
        runner: CommandRunner | None = None,
        proc_root: str | None = None,
        sys_root: str | None = None,
        rocminfo_paths: tuple[str, ...] = ROCMINFO_PATHS,
        command_timeout: float | None = None,
    ):
        self._runner = runner or run_command
        self._proc_root = Path(proc_root or settings.lite_llm_proc_root)
        self._sys_root = Path(sys_root or settings.lite_llm_sys_root)
        self._rocminfo_paths = rocminfo_paths
        self._timeout = command_timeout or settings.lite_llm_command_timeout

    async def probe(self) -> HardwareProfile:
        has_runtime = await self.check_container_runtime()

        gpu = await self.detect_gpu()
        if gpu is not None and gpu.memory_mb == 0:
            gpu = gpu.model_copy(update={"memory_mb": await self._fallback_gpu_memory(gpu.vendor)})

        profile = HardwareProfile(
            has_container_runtime=has_runtime,
            gpu_vendor=gpu.vendor if gpu else "unknown",
            gpu_model=gpu.model if gpu else "",
            gpu_memory_mb=gpu.memory_mb if gpu else 0,
            has_vendor_accel_stack=await self.check_rocm(),
            system_memory_mb=self.read_system_memory_mb(),
            kernel_version=await self.get_kernel_version(),
        )
        logger.debug("hardware_probed", **profile.model_dump())
        return profile

    async def _run(self, *args: str, timeout: float | None = None):
        return await self._runner(*args, timeout=timeout or self._timeout)

    # ── Sub-checks ───────────────────────────────────────────────────────────

    async def check_container_runtime(self) -> bool:
        result = await self._run("docker", "--version")
        return result.ok

    async def detect_gpu(self) -> GpuMatch | None:
        result = await self._run("lspci", "-v")
        if not result.ok:
            logger.warning("lspci_failed", returncode=result.returncode, reason=result.stderr.strip())
            return None
        return parsers.detect_gpu(result.stdout)

    async def _fallback_gpu_memory(self, vendor: str) -> int:
        if vendor == "nvidia":
            return await self.nvidia_smi_memory_mb()
        return self.amd_sysfs_memory_mb()

    async def nvidia_smi_memory_mb(self) -> int:
        result = await self._run(
            "nvidia-smi", "--query-gpu=memory.total", "--format=csv,noheader,nounits"
        )
        if not result.ok:
            return DEFAULT_GPU_MEMORY_MB
        try:
            return parsers.parse_nvidia_smi_memory(result.stdout)
        except ValueError:
            logger.debug("nvidia_smi_unparseable", output=result.stdout.strip())
            return DEFAULT_GPU_MEMORY_MB

    def drm_cards(self) -> list[Path]:
        """Primary DRM card directories under ``<sys_root>/class/drm``, in card order."""
        drm_dir = self._sys_root / "class" / "drm"
        try:
            names = os.listdir(drm_dir)
        except OSError:
            return []
        return [drm_dir / name for name in parsers.drm_card_names(names)]

    def amd_sysfs_memory_mb(self) -> int:
        for card in self.drm_cards():
            try:
                vram_bytes = parsers.parse_sysfs_int((card / "device" / "mem_info_vram_total").read_text())
            except (OSError, ValueError):
                continue
            return parsers.bytes_to_mb(vram_bytes)
        return DEFAULT_GPU_MEMORY_MB

    async def check_rocm(self) -> bool:
        # The first installed rocminfo decides; lsmod is only consulted when none is installed.
        for path in self._rocminfo_paths:
            if os.path.exists(path):
                result = await self._run(path)
                return result.ok

        result = await self._run("lsmod")
        if not result.ok:
            return False
        return parsers.module_loaded(result.stdout, AMD_KERNEL_MODULE)

    def read_system_memory_mb(self) -> int:
        try:
            return parsers.meminfo_total_mb((self._proc_root / "meminfo").read_text())
        except (OSError, KeyError) as e:
            logger.warning("meminfo_unreadable", reason=str(e))
            return 0

    async def get_kernel_version(self) -> str:
        result = await self._run("uname", "-r")
        if not result.ok:
            return "unknown"
        return result.stdout.strip()

    async def check_gpu_passthrough(self) -> bool:
        """Run the CUDA test image with ``--gpus all`` to confirm the container toolkit works."""
        result = await self._run(
            "docker", "run", "--rm", "--gpus", "all", CUDA_TEST_IMAGE, "nvidia-smi",
            timeout=PASSTHROUGH_TIMEOUT,
        )
        return result.ok
