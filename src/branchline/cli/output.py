"""Output utilities for CLI commands with clear intent.

user_output() is for everything a human reads (progress, errors, hints) and
goes to stderr. machine_output() is for values meant to be consumed by other
programs (e.g. `branchline config get`) and goes to stdout.
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Output informational message for human users (stderr)."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Output machine-readable value (stdout)."""
    click.echo(message, nl=nl)


def format_branch(branch: str) -> str:
    """Style a branch name for display."""
    return click.style(branch, fg="cyan", bold=True)
