"""Optional systemd unit for running the prover in the background."""

import getpass
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from .pipeline import DeployContext, StageResult

UNIT_TEMPLATE = """[Unit]
Description={description}
After=network.target

[Service]
Type=simple
User={user}
WorkingDirectory={working_directory}
ExecStart={exec_start}
Restart=always
RestartSec=10
Environment=RUST_LOG={rust_log}

[Install]
WantedBy=multi-user.target
"""


@dataclass(frozen=True)
class ServiceUnit:
    description: str
    user: str
    working_directory: Path
    binary: Path
    thread_count: int
    high_performance: bool = False
    rust_log: str = "info"

    def __post_init__(self):
        if isinstance(self.thread_count, bool) or not isinstance(self.thread_count, int):
            raise ValueError(f"Thread count must be an integer, got {self.thread_count!r}")
        if self.thread_count < 1:
            raise ValueError(f"Thread count must be at least 1, got {self.thread_count}")

    def exec_start(self) -> str:
        args = [str(self.binary), "start", "--max-threads", str(self.thread_count)]
        if self.high_performance:
            args.append("--high-performance")
        args.append("--headless")
        return " ".join(args)

    def render(self) -> str:
        return UNIT_TEMPLATE.format(
            description=self.description,
            user=self.user,
            working_directory=self.working_directory,
            exec_start=self.exec_start(),
            rust_log=self.rust_log,
        )


def unit_path(service_config: Dict[str, Any]) -> Path:
    """Where the unit file is installed"""
    return Path(service_config["unit_dir"]) / f"{service_config['name']}.service"


def build_unit(ctx: DeployContext, thread_count: int, high_performance: bool) -> ServiceUnit:
    """Unit for the release binary, run as the invoking user"""
    service_config = ctx.config["service"]
    return ServiceUnit(
        description=service_config["description"],
        user=getpass.getuser(),
        working_directory=ctx.cli_dir,
        binary=ctx.binary_path,
        thread_count=thread_count,
        high_performance=high_performance,
        rust_log=service_config["rust_log"],
    )


def management_commands(name: str) -> List[str]:
    """systemctl/journalctl hints printed after the unit is enabled"""
    unit = f"{name}.service"
    return [
        f"Start:  sudo systemctl start {unit}",
        f"Stop:   sudo systemctl stop {unit}",
        f"Status: sudo systemctl status {unit}",
        f"Logs:   journalctl -u {unit} -f",
    ]


def service_stage(ctx: DeployContext) -> StageResult:
    """Create and enable the systemd unit if the user asks for it"""
    prompter = ctx.prompter
    if not prompter.install_service():
        ctx.choices = ctx.choices.update(install_service=False)
        return StageResult.skipped("systemd service not created")

    thread_count = prompter.thread_count()
    high_performance = prompter.high_performance()
    ctx.choices = ctx.choices.update(
        install_service=True, thread_count=thread_count, high_performance=high_performance
    )

    try:
        unit = build_unit(ctx, thread_count, high_performance)
    except ValueError as e:
        return StageResult.fatal(str(e))

    service_config = ctx.config["service"]
    path = unit_path(service_config)
    unit_name = f"{service_config['name']}.service"

    ctx.runner.write_file(path, unit.render())
    ctx.runner.run(["systemctl", "daemon-reload"], sudo=True)
    ctx.runner.run(["systemctl", "enable", unit_name], sudo=True)

    ctx.log.success(f"systemd service {unit_name} created and enabled")
    ctx.log.info("Manage the service with:")
    for line in management_commands(service_config["name"]):
        ctx.log.line(f"  {line}")

    return StageResult.success()
