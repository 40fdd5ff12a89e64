"""Options shared by every workflow command."""

from collections.abc import Callable
from typing import TypeVar

import click

F = TypeVar("F", bound=Callable[..., object])


def workflow_options(func: F) -> F:
    """Add --dry-run and -v/--verbose to a command."""
    func = click.option(
        "-v",
        "--verbose",
        is_flag=True,
        help="Show debug output, including every planned opcode.",
    )(func)
    func = click.option(
        "--dry-run",
        is_flag=True,
        help="Print the git commands that would run without changing anything.",
    )(func)
    return func
