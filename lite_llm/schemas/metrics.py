from datetime import datetime

from pydantic import BaseModel

GPU_UNAVAILABLE = -1.0


class UtilizationSample(BaseModel):
    cpu_percent: float = 0.0
    memory_used_mb: int = 0
    memory_total_mb: int = 0
    memory_percent: float = 0.0
    gpu_percent: float = GPU_UNAVAILABLE  # -1 means unavailable, not idle
    gpu_memory_used_mb: int = 0
    gpu_memory_total_mb: int = 0
    timestamp: datetime

    model_config = {"frozen": True}

    @property
    def gpu_available(self) -> bool:
        return self.gpu_percent >= 0
