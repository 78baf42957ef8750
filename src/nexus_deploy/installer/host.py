"""Host facts gathered once during preflight."""

import os
import re
import shlex
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

GIB = 1024 ** 3


@dataclass(frozen=True)
class HostFacts:
    """Read-only description of the host being provisioned"""

    os_id: str
    os_version: str
    memory_gb: int
    cpu_cores: int
    disk_free_gb: int


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse os-release(5) ``KEY=value`` lines"""
    values = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("\"'")]
        values[key.strip()] = parts[0] if parts else ""
    return values


def read_os_release(path: Path) -> Dict[str, str]:
    """Read os-release; raises FileNotFoundError when absent"""
    return parse_os_release(path.read_text())


def version_tuple(version: str) -> Tuple[int, ...]:
    """Numeric version key: "1.80.1" -> (1, 80, 1), "24.04" -> (24, 4)"""
    return tuple(int(part) for part in re.findall(r"\d+", version))


def total_memory_gb() -> int:
    """Total physical memory in whole GiB, truncated like ``free -g``"""
    return (os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")) // GIB


def free_disk_gb(path: Path) -> int:
    """Free space on the filesystem holding ``path``, in whole GiB"""
    return shutil.disk_usage(path).free // GIB


def gather_host_facts(os_release: Path, disk_path: Path) -> HostFacts:
    """Collect host facts; raises FileNotFoundError without os-release"""
    release = read_os_release(os_release)
    return HostFacts(
        os_id=release.get("ID", ""),
        os_version=release.get("VERSION_ID", ""),
        memory_gb=total_memory_gb(),
        cpu_cores=os.cpu_count() or 1,
        disk_free_gb=free_disk_gb(disk_path),
    )
