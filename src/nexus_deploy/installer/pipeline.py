"""Ordered pipeline of provisioning stages."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..logger import StatusLogger
from .host import HostFacts
from .prompts import Prompter, UserChoices
from .runner import CommandError, CommandRunner


class StageStatus(str, Enum):
    SUCCESS = "success"
    ADVISORY = "advisory"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"
    FATAL = "fatal"


@dataclass(frozen=True)
class StageResult:
    status: StageStatus
    message: str = ""
    advisories: Tuple[str, ...] = ()

    @classmethod
    def success(cls, message: str = "") -> "StageResult":
        return cls(StageStatus.SUCCESS, message)

    @classmethod
    def skipped(cls, message: str = "") -> "StageResult":
        return cls(StageStatus.SKIPPED, message)

    @classmethod
    def cancelled(cls, message: str = "") -> "StageResult":
        return cls(StageStatus.CANCELLED, message)

    @classmethod
    def fatal(cls, message: str) -> "StageResult":
        return cls(StageStatus.FATAL, message)

    @classmethod
    def from_advisories(cls, advisories: Sequence[str], message: str = "") -> "StageResult":
        if advisories:
            return cls(StageStatus.ADVISORY, message, tuple(advisories))
        return cls(StageStatus.SUCCESS, message)


class DeployError(Exception):
    """Base error for a deployment run"""

    pass


class StageFailed(DeployError):
    """A stage returned a fatal result"""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"{stage}: {message}")


@dataclass
class DeployContext:
    """Everything a stage may read or record"""

    config: Dict[str, Any]
    runner: CommandRunner
    log: StatusLogger
    prompter: Prompter
    project_root: Path
    facts: Optional[HostFacts] = None
    choices: UserChoices = field(default_factory=UserChoices)

    @property
    def cli_dir(self) -> Path:
        return self.project_root / self.config["project"]["cli_subdir"]

    @property
    def binary_path(self) -> Path:
        return self.cli_dir / "target" / "release" / self.config["project"]["binary"]


Stage = Callable[[DeployContext], StageResult]


@dataclass(frozen=True)
class PipelineResult:
    results: List[Tuple[str, StageResult]]
    cancelled: bool = False

    @property
    def ran_stages(self) -> List[str]:
        return [name for name, _ in self.results]

    @property
    def advisories(self) -> List[str]:
        return [advisory for _, result in self.results for advisory in result.advisories]


class Pipeline:
    """Run stages in order, stopping at the first fatal or cancelled one"""

    def __init__(self, stages: Sequence[Tuple[str, Stage]]):
        self.stages = list(stages)

    def run(self, ctx: DeployContext) -> PipelineResult:
        results: List[Tuple[str, StageResult]] = []

        for name, stage in self.stages:
            ctx.log.debug(f"Stage: {name}")
            try:
                result = stage(ctx)
            except (CommandError, OSError, UnicodeError) as e:
                result = StageResult.fatal(str(e))

            results.append((name, result))

            if result.status is StageStatus.FATAL:
                ctx.log.error(result.message)
                raise StageFailed(name, result.message)

            if result.status is StageStatus.CANCELLED:
                if result.message:
                    ctx.log.info(result.message)
                return PipelineResult(results, cancelled=True)

        return PipelineResult(results)
