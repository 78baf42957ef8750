"""OS package and Rust toolchain installation."""

import shutil
import ssl
from pathlib import Path
from typing import Optional

import httpx

from .host import version_tuple
from .pipeline import DeployContext, StageResult

CARGO_BIN = Path.home() / ".cargo" / "bin"


def system_packages_stage(ctx: DeployContext) -> StageResult:
    """Refresh the apt index and install build/runtime packages"""
    runner = ctx.runner

    ctx.log.info("Updating package index...")
    runner.run(["apt", "update"], sudo=True, stream=True)

    packages = list(ctx.config["packages"])
    ctx.log.info(f"Installing system packages: {' '.join(packages)}")
    runner.run(["apt", "install", "-y"] + packages, sudo=True, stream=True)

    ctx.log.success("System dependencies installed")
    return StageResult.success()


def parse_rustc_version(output: str) -> str:
    """``rustc 1.79.0 (129f3b996 2024-06-10)`` -> ``1.79.0``"""
    parts = output.split()
    return parts[1] if len(parts) > 1 else ""


def fetch_rustup_installer(url: str, timeout: float) -> str:
    """Download the rustup shell installer over HTTPS (TLS 1.2 or newer)"""
    if not url.startswith("https://"):
        raise ValueError(f"Refusing to download the Rust installer over a non-HTTPS URL: {url}")

    tls = ssl.create_default_context()
    tls.minimum_version = ssl.TLSVersion.TLSv1_2

    with httpx.Client(verify=tls, timeout=timeout, follow_redirects=True) as client:
        response = client.get(url)
        response.raise_for_status()
        return response.text


def installed_rust_version(ctx: DeployContext) -> Optional[str]:
    """Version of the rustc on PATH, ``None`` if absent, ``""`` if unreadable"""
    if shutil.which("rustc", path=ctx.runner.env().get("PATH")) is None:
        return None
    result = ctx.runner.run(["rustc", "--version"], read_only=True)
    return parse_rustc_version(result.stdout)


def rust_stage(ctx: DeployContext) -> StageResult:
    """Install Rust with rustup, or update an installation that is too old"""
    rust_config = ctx.config["rust"]
    runner = ctx.runner
    log = ctx.log

    version = installed_rust_version(ctx)
    if version is not None:
        minimum = str(rust_config["min_version"])
        if not version:
            log.warning("Rust is installed but its version could not be determined, not updating")
        else:
            log.info(f"Rust is already installed, version: {version}")
            if version_tuple(version) < version_tuple(minimum):
                log.warning(f"Rust {version} is older than {minimum}, updating...")
                runner.run(["rustup", "update"], stream=True)
    else:
        log.info("Installing Rust...")
        if runner.dry_run:
            log.info(f"[dry-run] download {rust_config['installer_url']} | sh -s -- -y")
        else:
            try:
                script = fetch_rustup_installer(
                    rust_config["installer_url"], rust_config["download_timeout"]
                )
            except (httpx.HTTPError, ValueError) as e:
                return StageResult.fatal(f"Could not download the Rust installer: {e}")
            runner.run(["sh", "-s", "--", "-y"], input_text=script)
        runner.add_path(CARGO_BIN)
        log.success("Rust installed")

    for tool in ("rustc", "cargo"):
        result = runner.run([tool, "--version"])
        if result.stdout.strip():
            log.info(result.stdout.strip())

    return StageResult.success()
