"""External command execution for the provisioning stages."""

import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..logger import StatusLogger


class CommandError(RuntimeError):
    """A checked command exited non-zero or could not be started"""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"Command failed ({returncode}): {format_argv(self.argv)}{detail}")


@dataclass(frozen=True)
class CmdResult:
    argv: List[str]
    returncode: int
    stdout: str
    stderr: str


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
    """Run host commands with consistent logging.

    ``use_sudo`` prefixes privileged commands with ``sudo`` and routes
    privileged file writes through ``sudo tee``. ``dry_run`` logs what would
    happen and returns a successful empty result.
    """

    def __init__(self, log: StatusLogger, use_sudo: bool = True, dry_run: bool = False):
        self.log = log
        self.use_sudo = use_sudo
        self.dry_run = dry_run
        self.extra_path: List[str] = []

    def env(self) -> Dict[str, str]:
        """Process environment with any added PATH entries in front"""
        env = os.environ.copy()
        if self.extra_path:
            env["PATH"] = os.pathsep.join(self.extra_path + [env.get("PATH", "")])
        return env

    def add_path(self, directory: Path) -> None:
        """Prepend a directory to PATH for every later command"""
        entry = str(directory)
        if entry not in self.extra_path:
            self.extra_path.insert(0, entry)

    def run(
        self,
        cmd: Sequence[str],
        cwd: Optional[Path] = None,
        check: bool = True,
        sudo: bool = False,
        input_text: Optional[str] = None,
        stream: bool = False,
        read_only: bool = False,
    ) -> CmdResult:
        """Run a command and return the result.

        ``stream`` lets long-running tools (apt, cargo) write straight to the
        terminal instead of being captured. ``read_only`` commands only inspect
        the host and run even in dry-run mode.
        """
        argv = list(cmd)
        if sudo and self.use_sudo:
            argv = ["sudo"] + argv

        self.log.debug(f"Running: {format_argv(argv)}")
        if self.dry_run and not read_only:
            self.log.info(f"[dry-run] {format_argv(argv)}")
            return CmdResult(argv=argv, returncode=0, stdout="", stderr="")

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                input=input_text,
                capture_output=not stream,
                text=True,
                env=self.env(),
                errors="surrogateescape",
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(argv, 127, str(e)) from e

        stdout = result.stdout or ""
        stderr = result.stderr or ""
        if stdout.strip():
            self.log.debug(stdout.strip())
        if stderr.strip():
            self.log.debug(stderr.strip())

        if check and result.returncode != 0:
            raise CommandError(argv, result.returncode, stderr)

        return CmdResult(argv=argv, returncode=result.returncode, stdout=stdout, stderr=stderr)

    def write_file(self, path: Path, content: str) -> None:
        """Write a (possibly root-owned) file"""
        if self.dry_run:
            self.log.info(f"[dry-run] write {path} ({len(content)} bytes)")
            return

        if self.use_sudo:
            self.run(["tee", str(path)], sudo=True, input_text=content)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, errors="surrogateescape")
