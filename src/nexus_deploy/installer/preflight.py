"""Preflight checks run before anything on the host is changed."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from .host import HostFacts, gather_host_facts, version_tuple
from .pipeline import DeployContext, StageResult


def check_os_version(facts: HostFacts, host_config: Dict[str, Any]) -> Optional[str]:
    minimum = str(host_config["min_os_version"])
    if version_tuple(facts.os_version) < version_tuple(minimum):
        return f"Ubuntu {minimum} or newer is recommended, current version: {facts.os_version}"
    return None


def check_memory(facts: HostFacts, host_config: Dict[str, Any]) -> Optional[str]:
    if facts.memory_gb < host_config["min_memory_gb"]:
        return (
            f"Less than {host_config['min_memory_gb']}GB of memory, "
            "consider running with --memory-conservative"
        )
    return None


def check_disk(facts: HostFacts, host_config: Dict[str, Any]) -> Optional[str]:
    if facts.disk_free_gb < host_config["min_disk_gb"]:
        return (
            f"Less than {host_config['min_disk_gb']}GB of free disk space, "
            f"available: {facts.disk_free_gb}GB"
        )
    return None


def evaluate_host(facts: HostFacts, host_config: Dict[str, Any]) -> List[str]:
    """Return advisory messages for a host that passed the OS identity check"""
    checks = (check_os_version, check_memory, check_disk)
    return [advisory for advisory in (check(facts, host_config) for check in checks) if advisory]


def preflight_stage(ctx: DeployContext) -> StageResult:
    """Detect the OS and check host resources; stores ``ctx.facts``"""
    host_config = ctx.config["host"]
    os_release = Path(host_config["os_release"])
    disk_path = ctx.project_root if ctx.project_root.exists() else Path.cwd()

    try:
        facts = gather_host_facts(os_release, disk_path)
    except FileNotFoundError:
        return StageResult.fatal("Unable to detect the operating system version")

    if facts.os_id != host_config["distro_id"]:
        return StageResult.fatal(
            f"This installer only supports {host_config['distro_id']}, current system: {facts.os_id or 'unknown'}"
        )

    ctx.facts = facts
    log = ctx.log
    log.info(f"Detected {facts.os_id.capitalize()} {facts.os_version}")
    advisories = []

    advisory = check_os_version(facts, host_config)
    if advisory:
        log.warning(advisory)
        advisories.append(advisory)

    advisory = check_memory(facts, host_config)
    if advisory:
        log.warning(advisory)
        advisories.append(advisory)
    else:
        log.success(f"Memory: {facts.memory_gb}GB")

    log.info(f"CPU cores: {facts.cpu_cores}")

    advisory = check_disk(facts, host_config)
    if advisory:
        log.warning(advisory)
        advisories.append(advisory)
    else:
        log.success(f"Free disk space: {facts.disk_free_gb}GB")

    return StageResult.from_advisories(advisories)


def confirm_stage(ctx: DeployContext) -> StageResult:
    """Continue-or-abort branch after preflight"""
    proceed = ctx.prompter.proceed()
    ctx.choices = ctx.choices.update(proceed=proceed)
    if not proceed:
        return StageResult.cancelled("Installation cancelled")
    return StageResult.success()
