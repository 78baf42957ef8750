"""Input gathering, kept apart from the stages that consume it."""

from dataclasses import dataclass, replace
from typing import Optional

import click

RECOMMENDED_THREADS = "8-50"


@dataclass(frozen=True)
class UserChoices:
    """Answers to the deployment questions; ``None`` means not yet asked"""

    proceed: Optional[bool] = None
    install_service: Optional[bool] = None
    thread_count: Optional[int] = None
    high_performance: Optional[bool] = None

    def update(self, **changes) -> "UserChoices":
        return replace(self, **changes)


class Prompter:
    """Ask the user a question; subclasses decide where the answer comes from"""

    def proceed(self) -> bool:
        raise NotImplementedError

    def install_service(self) -> bool:
        raise NotImplementedError

    def thread_count(self) -> int:
        raise NotImplementedError

    def high_performance(self) -> bool:
        raise NotImplementedError


class InteractivePrompter(Prompter):
    """Prompt on the terminal with click"""

    def proceed(self) -> bool:
        return click.confirm("Continue with installation?", default=False)

    def install_service(self) -> bool:
        return click.confirm("Create a systemd service so the prover starts at boot?", default=False)

    def thread_count(self) -> int:
        return click.prompt(
            f"Number of threads to use (recommended: {RECOMMENDED_THREADS})",
            type=click.IntRange(min=1),
        )

    def high_performance(self) -> bool:
        return click.confirm("Enable high-performance mode?", default=False)


class PresetPrompter(Prompter):
    """Answer from preset choices, asking ``fallback`` for anything unset.

    Without a fallback an unset answer is a programming error; tests use this
    as a fully scripted double.
    """

    def __init__(self, choices: UserChoices, fallback: Optional[Prompter] = None):
        self.choices = choices
        self.fallback = fallback

    def _answer(self, name: str):
        value = getattr(self.choices, name)
        if value is not None:
            return value
        if self.fallback is None:
            raise LookupError(f"No answer for '{name}'")
        return getattr(self.fallback, name)()

    def proceed(self) -> bool:
        return self._answer("proceed")

    def install_service(self) -> bool:
        return self._answer("install_service")

    def thread_count(self) -> int:
        return self._answer("thread_count")

    def high_performance(self) -> bool:
        return self._answer("high_performance")

