"""Base class for integration wrappers that print operations before delegating."""

from typing import Generic, TypeVar

import click

from branchline.cli.output import user_output

T = TypeVar("T")


class PrintingBase(Generic[T]):
    """Shared plumbing for Printing* wrappers.

    Subclasses call `_emit(self._format_command(...))` for every operation
    that changes state, then delegate to `self._wrapped`.
    """

    def __init__(self, wrapped: T, *, dry_run: bool = False) -> None:
        """Create a printing wrapper.

        Args:
            wrapped: The implementation to delegate to (Real, DryRun or Fake)
            dry_run: If True, prefix printed commands with a dry-run marker
        """
        self._wrapped = wrapped
        self._dry_run = dry_run

    def _emit(self, message: str) -> None:
        user_output(message)

    def _format_command(self, command: str) -> str:
        formatted = click.style(command, bold=True)
        if self._dry_run:
            return click.style("[DRY RUN] ", fg="yellow") + formatted
        return formatted
