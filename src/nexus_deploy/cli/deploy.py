"""Full deployment command"""

from pathlib import Path

import click

from nexus_deploy.installer import DeployContext, StageFailed, default_pipeline
from nexus_deploy.installer.prompts import InteractivePrompter, PresetPrompter, UserChoices
from nexus_deploy.installer.runner import CommandRunner


def resolve_project_root(cfg, project_root) -> Path:
    """--project-root, then project.root from config, then the working directory"""
    if project_root:
        return Path(project_root).resolve()
    if cfg["project"].get("root"):
        return Path(cfg["project"]["root"]).expanduser().resolve()
    return Path.cwd()


@click.command()
@click.option("--project-root", type=click.Path(file_okay=False), help="Nexus checkout (default: current directory)")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.option("--service/--no-service", default=None, help="Create the systemd service without asking")
@click.option("--threads", type=click.IntRange(min=1), help="Thread count for the systemd service")
@click.option("--high-performance/--no-high-performance", default=None, help="High-performance mode for the service")
@click.option("--dry-run", is_flag=True, help="Log commands and file writes without executing them")
@click.pass_context
def deploy(ctx, project_root, yes, service, threads, high_performance, dry_run):
    """Install dependencies, tune the host and build the Nexus CLI"""
    cfg = ctx.obj["config"]
    log = ctx.obj["log"]

    choices = UserChoices(
        proceed=True if yes else None,
        install_service=service,
        thread_count=threads,
        high_performance=high_performance,
    )
    deploy_ctx = DeployContext(
        config=cfg,
        runner=CommandRunner(log, use_sudo=cfg["system"]["use_sudo"], dry_run=dry_run),
        log=log,
        prompter=PresetPrompter(choices, fallback=InteractivePrompter()),
        project_root=resolve_project_root(cfg, project_root),
    )

    log.banner("Nexus CLI deployment")

    try:
        result = default_pipeline().run(deploy_ctx)
    except StageFailed:
        ctx.exit(1)

    if result.cancelled:
        return

    if result.advisories:
        log.warning(f"Deployment finished with {len(result.advisories)} advisory warning(s):")
        for advisory in result.advisories:
            log.line(f"  - {advisory}")
    else:
        log.success("Deployment finished")
