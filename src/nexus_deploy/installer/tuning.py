"""Persistent kernel and resource-limit tuning.

Each setting is a desired line plus a pattern recognising any existing
entry for it. Reconciliation rewrites the first matching entry, drops later
duplicates, appends the line when missing and leaves everything else alone,
so the computed content is stable across runs and the file is only written
when it actually changes.
"""

import re
from pathlib import Path
from typing import List, Pattern, Sequence, Tuple

from .pipeline import DeployContext, StageResult

Entry = Tuple[Pattern[str], str]


def limits_entries(nofile: int) -> List[Entry]:
    """Soft and hard open-file limits for every user (`*`)"""
    return [
        (re.compile(rf"^\s*\*\s+{kind}\s+nofile\s+\S+\s*(#.*)?$"), f"* {kind} nofile {nofile}")
        for kind in ("soft", "hard")
    ]


def sysctl_entries(key: str, value: int) -> List[Entry]:
    """A single `key=value` assignment, matched with any spacing"""
    return [(re.compile(rf"^\s*{re.escape(key)}\s*=.*$"), f"{key}={value}")]


def reconcile(text: str, entries: Sequence[Entry]) -> str:
    """Return ``text`` with every entry present exactly once"""
    lines = text.splitlines()
    seen = [False] * len(entries)
    result = []

    for line in lines:
        for index, (pattern, desired) in enumerate(entries):
            if pattern.match(line):
                if not seen[index]:
                    result.append(desired)
                    seen[index] = True
                break
        else:
            result.append(line)

    for index, (_, desired) in enumerate(entries):
        if not seen[index]:
            result.append(desired)

    return "\n".join(result) + "\n"


def apply_file(ctx: DeployContext, path: Path, entries: Sequence[Entry]) -> bool:
    """Write the reconciled file if it differs; return whether it changed"""
    current = path.read_text(errors="surrogateescape") if path.exists() else ""
    desired = reconcile(current, entries)
    if desired == current:
        ctx.log.info(f"{path} already up to date")
        return False

    ctx.runner.write_file(path, desired)
    return True


def tuning_stage(ctx: DeployContext) -> StageResult:
    """Raise the open-file limit and ``vm.max_map_count``"""
    tuning = ctx.config["tuning"]
    log = ctx.log
    log.info("Tuning system configuration...")

    limits_file = Path(tuning["limits_file"])
    if apply_file(ctx, limits_file, limits_entries(tuning["nofile"])):
        log.success(f"File descriptor limit set to {tuning['nofile']}")

    sysctl_file = Path(tuning["sysctl_file"])
    if apply_file(ctx, sysctl_file, sysctl_entries("vm.max_map_count", tuning["max_map_count"])):
        ctx.runner.run(["sysctl", "-p", str(sysctl_file)], sudo=True)
        log.success(f"vm.max_map_count set to {tuning['max_map_count']}")

    log.success("System tuning complete")
    return StageResult.success()
