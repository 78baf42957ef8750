"""Post-install guidance: run modes and a recommendation for this host."""

from dataclasses import dataclass
from typing import List, Tuple

from .pipeline import DeployContext, StageResult


@dataclass(frozen=True)
class Preset:
    name: str
    threads: int
    flags: Tuple[str, ...]
    min_memory_gb: int

    def arguments(self, headless: bool = True) -> List[str]:
        args = ["start", "--max-threads", str(self.threads), *self.flags]
        if headless:
            args.append("--headless")
        return args

    def command(self, binary: str, headless: bool = True) -> str:
        return " ".join([binary] + self.arguments(headless))


HIGH_PERFORMANCE = Preset("high-performance", 50, ("--high-performance",), 16)
BALANCED = Preset("balanced", 25, (), 8)
CONSERVATIVE = Preset("conservative", 10, ("--memory-conservative",), 4)

PRESETS = (HIGH_PERFORMANCE, BALANCED, CONSERVATIVE)


def recommend_preset(memory_gb: int) -> Preset:
    """Pick the run mode for a host with ``memory_gb`` of RAM"""
    if memory_gb >= HIGH_PERFORMANCE.min_memory_gb:
        return HIGH_PERFORMANCE
    if memory_gb >= BALANCED.min_memory_gb:
        return BALANCED
    return CONSERVATIVE


def print_modes(ctx: DeployContext, binary: str) -> None:
    """List every preset with its headless command"""
    ctx.log.info("Available run modes:")
    for number, preset in enumerate(PRESETS, start=1):
        ctx.log.line(f"{number}. {preset.name} (for {preset.min_memory_gb}GB+ memory):")
        ctx.log.line(f"   {preset.command(binary)}")


def print_recommendation(ctx: DeployContext, binary: str, memory_gb: int) -> Preset:
    """Print the quick-start command for the preset matching ``memory_gb``"""
    preset = recommend_preset(memory_gb)
    ctx.log.line(f"# {preset.name} mode (recommended for {memory_gb}GB memory)")
    ctx.log.line(preset.command(binary, headless=False))
    return preset


def report_stage(ctx: DeployContext) -> StageResult:
    """Print run modes, the recommended command and where things live"""
    log = ctx.log
    binary = f"./target/release/{ctx.config['project']['binary']}"
    memory_gb = ctx.facts.memory_gb if ctx.facts else 0

    log.section("Run modes")
    print_modes(ctx, binary)

    log.section("Deployment complete")
    log.info(f"Project location: {ctx.project_root}")
    log.info(f"Executable: {ctx.binary_path}")
    log.info("Quick start:")
    log.line(f"cd {ctx.cli_dir}")
    print_recommendation(ctx, binary, memory_gb)
    log.info(f"All options: {binary} start --help")

    return StageResult.success()
