"""Shared fixtures: scripted runner, captured logger and a sandboxed config"""

import io
from pathlib import Path

import pytest
from rich.console import Console

from nexus_deploy.config.manager import ConfigManager, merge
from nexus_deploy.installer.pipeline import DeployContext
from nexus_deploy.installer.prompts import PresetPrompter, UserChoices
from nexus_deploy.installer.runner import CmdResult, CommandError, CommandRunner
from nexus_deploy.logger import StatusLogger

UBUNTU_RELEASE = 'NAME="Ubuntu"\nVERSION_ID="24.04"\nID=ubuntu\nID_LIKE=debian\n'
DEBIAN_RELEASE = 'NAME="Debian GNU/Linux"\nVERSION_ID="12"\nID=debian\n'


class FakeRunner(CommandRunner):
    """Record commands instead of running them.

    ``responses`` maps a command line (joined with spaces) to
    ``(returncode, stdout)``; ``on_run`` is called with ``(argv, cwd)`` for
    side effects such as creating a build artifact.
    """

    def __init__(self, log, responses=None, on_run=None):
        super().__init__(log, use_sudo=False)
        self.commands = []
        self.inputs = []
        self.responses = responses or {}
        self.on_run = on_run

    def run(self, cmd, cwd=None, check=True, sudo=False, input_text=None, stream=False, read_only=False):
        argv = list(cmd)
        self.commands.append(argv)
        self.inputs.append(input_text)
        if self.on_run:
            self.on_run(argv, cwd)

        returncode, stdout = self.responses.get(" ".join(argv), (0, ""))
        if check and returncode != 0:
            raise CommandError(argv, returncode, "scripted failure")
        return CmdResult(argv=argv, returncode=returncode, stdout=stdout, stderr="")


class CapturedLog(StatusLogger):
    """StatusLogger writing plain text to a buffer"""

    def __init__(self):
        self.buffer = io.StringIO()
        super().__init__(Console(file=self.buffer, width=200, color_system=None), level="info")

    @property
    def text(self) -> str:
        return self.buffer.getvalue()


@pytest.fixture
def log():
    """Captured logger"""
    return CapturedLog()


@pytest.fixture
def runner(log):
    """Scripted runner that succeeds by default"""
    return FakeRunner(log)


@pytest.fixture
def os_release(tmp_path):
    """Ubuntu 24.04 os-release file"""
    path = tmp_path / "os-release"
    path.write_text(UBUNTU_RELEASE)
    return path


@pytest.fixture
def config(tmp_path, os_release):
    """Defaults pointed at files inside tmp_path"""
    etc = tmp_path / "etc"
    etc.mkdir()
    return merge(
        ConfigManager.defaults(),
        {
            "host": {"os_release": str(os_release)},
            "tuning": {
                "limits_file": str(etc / "limits.conf"),
                "sysctl_file": str(etc / "sysctl.conf"),
            },
            "service": {"unit_dir": str(etc / "systemd")},
            "system": {"use_sudo": False},
        },
    )


@pytest.fixture
def project_root(tmp_path):
    """Checkout with an empty clients/cli directory"""
    root = tmp_path / "nexus"
    (root / "clients" / "cli").mkdir(parents=True)
    return root


@pytest.fixture
def make_ctx(config, runner, log, project_root):
    """Factory for DeployContext with preset answers"""

    def factory(choices=None, **overrides):
        values = dict(
            config=config,
            runner=runner,
            log=log,
            prompter=PresetPrompter(choices or UserChoices()),
            project_root=project_root,
        )
        values.update(overrides)
        return DeployContext(**values)

    return factory


def write_manifest(project_root: Path) -> Path:
    """Create clients/cli/Cargo.toml"""
    manifest = project_root / "clients" / "cli" / "Cargo.toml"
    manifest.write_text('[package]\nname = "nexus-network"\n')
    return manifest


def produce_binary(project_root: Path):
    """on_run hook that creates the release binary when cargo builds"""

    def hook(argv, cwd):
        if argv[:2] == ["cargo", "build"]:
            binary = project_root / "clients" / "cli" / "target" / "release" / "nexus-network"
            binary.parent.mkdir(parents=True, exist_ok=True)
            binary.write_text("#!/bin/sh\n")

    return hook
