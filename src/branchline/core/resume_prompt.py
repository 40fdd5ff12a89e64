"""Decision provider for the unfinished-run dialog.

When a previous run halted, the next command asks the user how to proceed.
The question is answered through this ABC so tests can script the answers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import click

from branchline.cli.output import format_branch, user_output


class ResumeResponse(Enum):
    CONTINUE = "continue"
    SKIP = "skip"
    UNDO = "undo"
    DISCARD = "discard"
    QUIT = "quit"


@dataclass(frozen=True)
class UnfinishedRunInfo:
    """What the user is told about the halted run."""

    command: str
    end_branch: str | None
    end_time: datetime
    can_skip: bool


class ResumePrompt(ABC):
    @abstractmethod
    def ask(self, info: UnfinishedRunInfo) -> ResumeResponse:
        """Ask how to proceed with a halted run.

        Implementations may return any value; callers validate it.
        """
        ...


def response_choices(can_skip: bool) -> list[ResumeResponse]:
    """Responses offered for a halted run, in display order."""
    choices = [ResumeResponse.CONTINUE]
    if can_skip:
        choices.append(ResumeResponse.SKIP)
    choices.extend([ResumeResponse.UNDO, ResumeResponse.DISCARD, ResumeResponse.QUIT])
    return choices


class InteractiveResumePrompt(ResumePrompt):
    """Asks on the terminal with click.prompt."""

    def ask(self, info: UnfinishedRunInfo) -> ResumeResponse:
        when = info.end_time.strftime("%Y-%m-%d %H:%M:%S")
        branch = format_branch(info.end_branch) if info.end_branch else "(detached)"
        user_output(
            click.style("You have an unfinished ", fg="yellow")
            + click.style(info.command, bold=True)
            + click.style(" command that ended on ", fg="yellow")
            + branch
            + click.style(f" at {when}.", fg="yellow")
        )
        choices = response_choices(info.can_skip)
        value = click.prompt(
            "How do you want to proceed?",
            type=click.Choice([choice.value for choice in choices]),
            default=ResumeResponse.QUIT.value,
            err=True,
        )
        return ResumeResponse(value)
