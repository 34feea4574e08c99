from typing import Literal

from pydantic import BaseModel

GpuVendor = Literal["amd", "nvidia", "unknown"]


class HardwareProfile(BaseModel):
    """Point-in-time hardware facts. Built fresh on every probe."""

    has_container_runtime: bool = False
    gpu_vendor: GpuVendor = "unknown"
    gpu_model: str = ""
    gpu_memory_mb: int = 0
    has_vendor_accel_stack: bool = False
    system_memory_mb: int = 0
    kernel_version: str = "unknown"

    model_config = {"frozen": True}


class GpuMatch(BaseModel):
    """A VGA controller line recognized in lspci output."""

    vendor: GpuVendor
    model: str
    memory_mb: int = 0  # 0 when lspci didn't report a size
