"""Release build of the Nexus CLI."""

from .pipeline import DeployContext, StageResult

MANIFEST = "Cargo.toml"


def build_stage(ctx: DeployContext) -> StageResult:
    """Build the CLI in release mode and check the binary answers ``--version``"""
    log = ctx.log
    cli_dir = ctx.cli_dir
    log.info(f"Building the Nexus CLI in {cli_dir}...")

    if not (cli_dir / MANIFEST).is_file():
        return StageResult.fatal(
            f"{MANIFEST} not found in {cli_dir}, make sure you run this from the project root"
        )

    log.info("Building release binary...")
    ctx.runner.run(["cargo", "build", "--release"], cwd=cli_dir, stream=True)

    binary = ctx.binary_path
    if not ctx.runner.dry_run and not binary.is_file():
        return StageResult.fatal(f"Build failed: {binary} was not produced")

    log.success("Build succeeded")
    result = ctx.runner.run([str(binary), "--version"], cwd=cli_dir)
    if result.stdout.strip():
        log.info(result.stdout.strip())

    return StageResult.success()
