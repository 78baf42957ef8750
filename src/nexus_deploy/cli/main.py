#!/usr/bin/env python3
"""nexus-deploy CLI - Main entry point"""

from pathlib import Path

import click
from rich.console import Console

from nexus_deploy.config.manager import DEFAULT_CONFIG_PATH, ConfigError, ConfigManager
from nexus_deploy.logger import StatusLogger

console = Console()


@click.group()
@click.option("--config", type=click.Path(dir_okay=False), help="Config file path")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, config, verbose):
    """nexus-deploy - provision this host for the Nexus CLI prover"""
    ctx.ensure_object(dict)

    config_path = Path(config) if config else DEFAULT_CONFIG_PATH
    try:
        cfg = ConfigManager(config_path).load()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if verbose:
        cfg["logging"]["level"] = "debug"

    ctx.obj["config"] = cfg
    ctx.obj["log"] = StatusLogger.from_config(cfg, console=console)


@cli.command()
def version():
    """Show version information"""
    from nexus_deploy import __version__

    console.print(f"nexus-deploy version {__version__}")


from nexus_deploy.cli import deploy, host

cli.add_command(deploy.deploy)
cli.add_command(host.preflight)
cli.add_command(host.recommend)
cli.add_command(host.service)


if __name__ == "__main__":
    cli()
