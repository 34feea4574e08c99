import structlog

from lite_llm.core.exceptions import RequirementsNotMetError
from lite_llm.schemas.hardware import HardwareProfile

logger = structlog.get_logger()

MIN_GPU_MEMORY_MB = 6144
MIN_SYSTEM_MEMORY_MB = 8192

ROCM_INSTALL_URL = "https://rocm.docs.amd.com/projects/install-on-linux/en/latest/"
NVIDIA_TOOLKIT_URL = (
    "https://docs.nvidia.com/datacenter/cloud-native/container-toolkit/install-guide.html"
)


def collect_warnings(profile: HardwareProfile, gpu_passthrough: bool | None = None) -> list[str]:
    """Soft problems that degrade acceleration but don't block a deployment."""
    warnings = []
    if profile.gpu_vendor == "amd" and not profile.has_vendor_accel_stack:
        warnings.append("ROCm not detected - AMD GPU acceleration may not work properly")
        warnings.append(f"Install ROCm for optimal performance: {ROCM_INSTALL_URL}")
    if profile.gpu_vendor == "nvidia" and gpu_passthrough is False:
        warnings.append("NVIDIA Container Toolkit not detected - GPU acceleration may not work properly")
        warnings.append(f"Install NVIDIA Container Toolkit: {NVIDIA_TOOLKIT_URL}")
    return warnings


def collect_violations(profile: HardwareProfile) -> list[str]:
    """Hard requirement failures in fixed order: runtime, vendor, GPU memory, system memory."""
    violations = []
    if not profile.has_container_runtime:
        violations.append("Docker is not installed or not accessible")
    if profile.gpu_vendor == "unknown":
        violations.append("No supported GPU detected (NVIDIA or AMD)")
    if profile.gpu_memory_mb < MIN_GPU_MEMORY_MB:
        violations.append(
            f"GPU memory ({profile.gpu_memory_mb}MB) is below recommended minimum (6GB)"
        )
    if profile.system_memory_mb < MIN_SYSTEM_MEMORY_MB:
        violations.append(
            f"System memory ({profile.system_memory_mb}MB) is below recommended minimum (8GB)"
        )
    return violations


def validate_requirements(profile: HardwareProfile, gpu_passthrough: bool | None = None) -> list[str]:
    """Check a probed profile against deployment minimums.

    ``gpu_passthrough`` is the result of ``HardwareProber.check_gpu_passthrough()``
    for NVIDIA hosts, or None when it wasn't checked.

    Returns the warnings (also logged). Raises RequirementsNotMetError listing
    every violated requirement. A missing vendor stack is never a violation.
    """
    warnings = collect_warnings(profile, gpu_passthrough)
    for message in warnings:
        logger.warning("hardware_requirement_warning", message=message)

    violations = collect_violations(profile)
    if violations:
        raise RequirementsNotMetError(violations)
    return warnings
