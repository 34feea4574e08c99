"""Pure parsers for OS tool output and pseudo-files.

Every pattern that depends on the exact text of ``lspci``, ``/proc`` or
``/sys`` lives here, so matching rules can change without touching the
prober or the sampler. Nothing in this module does I/O.
"""

import re

from lite_llm.schemas.hardware import GpuMatch, GpuVendor

VGA_MARKER = "VGA compatible controller"

# Checked in order; the first vendor whose pattern matches wins.
VENDOR_PATTERNS: tuple[tuple[GpuVendor, re.Pattern[str]], ...] = (
    ("nvidia", re.compile(r"NVIDIA.*(GeForce|RTX|GTX|Tesla|Quadro)", re.IGNORECASE)),
    ("amd", re.compile(r"(AMD|ATI).*(Radeon|RX|Ellesmere|Polaris)", re.IGNORECASE)),
)

LSPCI_MEMORY_RE = re.compile(r"memory.*?(\d+)([MG])B", re.IGNORECASE)
LSPCI_MEMORY_LOOKAHEAD = 20

DRM_CARD_RE = re.compile(r"^card(\d+)$")

CPU_AGGREGATE_MARKER = "cpu"
CPU_MIN_FIELDS = 8
CPU_IDLE_INDEX = 3  # zero-based, counted after the marker

MEMINFO_KEYS = ("MemTotal", "MemFree", "Buffers", "Cached")


def find_gpu(lspci_output: str, vendor: GpuVendor) -> GpuMatch | None:
    """Find the first VGA controller line for ``vendor`` in ``lspci -v`` output.

    The model is the text after the first ``": "`` on the matched line. Memory
    is taken from the device block below it: up to 20 lines, stopping at the
    first blank line.
    """
    pattern = dict(VENDOR_PATTERNS)[vendor]
    lines = lspci_output.split("\n")

    for i, line in enumerate(lines):
        if VGA_MARKER not in line or not pattern.search(line):
            continue

        model = ""
        parts = line.split(": ", 1)
        if len(parts) > 1:
            model = parts[1].strip()

        memory_mb = 0
        for following in lines[i + 1 : i + LSPCI_MEMORY_LOOKAHEAD]:
            if not following.strip():
                break
            match = LSPCI_MEMORY_RE.search(following)
            if match:
                size = int(match.group(1))
                memory_mb = size * 1024 if match.group(2) == "G" else size
                break

        return GpuMatch(vendor=vendor, model=model, memory_mb=memory_mb)

    return None


def detect_gpu(lspci_output: str) -> GpuMatch | None:
    """Return the primary GPU, NVIDIA before AMD. Multi-vendor hosts report only the first match."""
    for vendor, _pattern in VENDOR_PATTERNS:
        match = find_gpu(lspci_output, vendor)
        if match is not None:
            return match
    return None


def parse_nvidia_smi_memory(output: str) -> int:
    """Parse ``nvidia-smi --query-gpu=memory.total --format=csv,noheader,nounits``.

    Multi-GPU hosts print one line per card; the first card is reported.
    Raises ValueError when the output isn't a number.
    """
    first = output.strip().splitlines()[0] if output.strip() else ""
    return int(first.strip())


def drm_card_names(entries: list[str]) -> list[str]:
    """Filter DRM class entries to primary cards (``card0``, not ``card0-DP-1``), numerically sorted."""
    cards = [name for name in entries if DRM_CARD_RE.match(name)]
    return sorted(cards, key=lambda name: int(DRM_CARD_RE.match(name).group(1)))


def parse_sysfs_int(text: str) -> int:
    return int(text.strip())


def bytes_to_mb(value: int) -> int:
    return value // (1024 * 1024)


def parse_meminfo(text: str) -> dict[str, int]:
    """Parse ``/proc/meminfo`` into a ``{key: kB}`` mapping. Unparseable lines are skipped."""
    values: dict[str, int] = {}
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        key = fields[0].rstrip(":")
        try:
            values[key] = int(fields[1])
        except ValueError:
            continue
    return values


def meminfo_total_mb(text: str) -> int:
    """MemTotal in MB (integer floor). Raises KeyError when the line is missing."""
    return parse_meminfo(text)["MemTotal"] // 1024


def memory_usage_mb(text: str) -> tuple[int, int]:
    """Return ``(used_mb, total_mb)`` where used excludes buffers and page cache."""
    values = parse_meminfo(text)
    total, free, buffers, cached = (values.get(key, 0) // 1024 for key in MEMINFO_KEYS)
    return total - free - buffers - cached, total


def cpu_usage_percent(stat_text: str) -> float:
    """Busy share of CPU time since boot, from the aggregate line of ``/proc/stat``.

    This is a cumulative ratio, not a rate: it doesn't diff two readings.
    Raises ValueError on a malformed line.
    """
    first_line = stat_text.split("\n", 1)[0]
    fields = first_line.split()
    if len(fields) < CPU_MIN_FIELDS or fields[0] != CPU_AGGREGATE_MARKER:
        raise ValueError(f"unexpected /proc/stat line: {first_line!r}")

    counters = [int(field) for field in fields[1:]]
    total = sum(counters)
    idle = counters[CPU_IDLE_INDEX]
    if total == 0:
        return 0.0
    return (total - idle) / total * 100


def module_loaded(lsmod_output: str, module: str) -> bool:
    return module in lsmod_output
