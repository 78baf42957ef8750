"""Host inspection commands"""

import click
from rich.console import Console
from rich.table import Table

from nexus_deploy.cli.deploy import resolve_project_root
from nexus_deploy.installer import DeployContext, StageStatus
from nexus_deploy.installer.host import total_memory_gb
from nexus_deploy.installer.preflight import preflight_stage
from nexus_deploy.installer.prompts import PresetPrompter, UserChoices
from nexus_deploy.installer.report import PRESETS, recommend_preset
from nexus_deploy.installer.runner import CommandRunner
from nexus_deploy.installer.service import build_unit

console = Console()


def read_only_context(ctx, project_root) -> DeployContext:
    cfg = ctx.obj["config"]
    log = ctx.obj["log"]
    return DeployContext(
        config=cfg,
        runner=CommandRunner(log, use_sudo=False, dry_run=True),
        log=log,
        prompter=PresetPrompter(UserChoices()),
        project_root=resolve_project_root(cfg, project_root),
    )


@click.command()
@click.option("--project-root", type=click.Path(file_okay=False), help="Nexus checkout (default: current directory)")
@click.pass_context
def preflight(ctx, project_root):
    """Check the OS and host resources without changing anything"""
    deploy_ctx = read_only_context(ctx, project_root)
    result = preflight_stage(deploy_ctx)

    if result.status is StageStatus.FATAL:
        deploy_ctx.log.error(result.message)
        ctx.exit(1)

    facts = deploy_ctx.facts
    table = Table(title="Host")
    table.add_column("Fact", style="cyan")
    table.add_column("Value")
    table.add_row("OS", f"{facts.os_id} {facts.os_version}")
    table.add_row("Memory", f"{facts.memory_gb}GB")
    table.add_row("CPU cores", str(facts.cpu_cores))
    table.add_row("Free disk", f"{facts.disk_free_gb}GB")
    table.add_row("Recommended mode", recommend_preset(facts.memory_gb).name)
    console.print(table)


@click.command()
@click.option("--memory-gb", type=click.IntRange(min=0), help="Memory to recommend for (default: this host)")
@click.pass_context
def recommend(ctx, memory_gb):
    """Show the run modes and the one recommended for this host"""
    cfg = ctx.obj["config"]
    binary = f"./target/release/{cfg['project']['binary']}"
    if memory_gb is None:
        memory_gb = total_memory_gb()
    chosen = recommend_preset(memory_gb)

    table = Table(title=f"Run modes ({memory_gb}GB memory)")
    table.add_column("Mode", style="cyan")
    table.add_column("Memory")
    table.add_column("Command", style="green")
    for preset in PRESETS:
        name = f"{preset.name} (recommended)" if preset is chosen else preset.name
        table.add_row(name, f"{preset.min_memory_gb}GB+", preset.command(binary))
    console.print(table)


@click.command()
@click.option("--project-root", type=click.Path(file_okay=False), help="Nexus checkout (default: current directory)")
@click.option("--threads", type=click.IntRange(min=1), required=True, help="Thread count")
@click.option("--high-performance", is_flag=True, help="Enable high-performance mode")
@click.pass_context
def service(ctx, project_root, threads, high_performance):
    """Print the systemd unit without installing it"""
    deploy_ctx = read_only_context(ctx, project_root)
    unit = build_unit(deploy_ctx, threads, high_performance)
    click.echo(unit.render(), nl=False)
