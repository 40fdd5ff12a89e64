"""Ordered opcode sequences and their composition helpers."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from branchline.vm.opcodes import (
    ChangeDirectory,
    Opcode,
    PreserveCheckoutHistory,
    RestoreOpenChanges,
    StashOpenChanges,
)


class Program:
    """An ordered, appendable list of opcodes.

    Insertion order is execution order; nothing is deduplicated.
    """

    def __init__(self, opcodes: Iterable[Opcode] = ()) -> None:
        self._opcodes: list[Opcode] = list(opcodes)

    def append(self, opcode: Opcode) -> None:
        self._opcodes.append(opcode)

    def append_all(self, other: "Program | Iterable[Opcode]") -> None:
        self._opcodes.extend(other)

    def prepend_all(self, opcodes: Iterable[Opcode]) -> None:
        self._opcodes[:0] = list(opcodes)

    def peek(self) -> Opcode | None:
        return self._opcodes[0] if self._opcodes else None

    def pop(self) -> Opcode:
        return self._opcodes.pop(0)

    def is_empty(self) -> bool:
        return not self._opcodes

    def opcodes(self) -> list[Opcode]:
        return list(self._opcodes)

    def __iter__(self) -> Iterator[Opcode]:
        return iter(list(self._opcodes))

    def __len__(self) -> int:
        return len(self._opcodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        return self._opcodes == other._opcodes

    def __repr__(self) -> str:
        return f"Program({self._opcodes!r})"


@dataclass(frozen=True)
class WrapOptions:
    """How a workflow program gets bracketed before it runs.

    Attributes:
        dry_run: The run only prints; checkout history is left alone
        run_in_repo_root: Run from the repository root and come back afterwards
        stash_open_changes: Stash uncommitted changes first, restore them last
        previous_branch_candidates: Branches `git checkout -` should point at
            afterwards, most preferred first
        initial_directory: Directory the command was started from
        repo_root: Repository root, required with run_in_repo_root
    """

    dry_run: bool = False
    run_in_repo_root: bool = False
    stash_open_changes: bool = False
    previous_branch_candidates: tuple[str, ...] = field(default_factory=tuple)
    initial_directory: Path | None = None
    repo_root: Path | None = None


def wrap(program: Program, options: WrapOptions) -> Program:
    """Surround a planned program with setup and teardown opcodes.

    The result runs, in order: stash open changes, change into the repo root,
    the program itself, a change back into the starting directory,
    checkout-history repair, and restoring stashed changes. Workflows that end on a
    different branch than they started on plan that checkout themselves.
    """
    leave_root = (
        options.run_in_repo_root
        and options.repo_root is not None
        and options.initial_directory is not None
        and options.initial_directory != options.repo_root
    )

    result = Program()
    if options.stash_open_changes:
        result.append(StashOpenChanges())
    if leave_root:
        assert options.repo_root is not None
        result.append(ChangeDirectory(path=str(options.repo_root)))
    result.append_all(program)
    if leave_root:
        assert options.initial_directory is not None
        result.append(ChangeDirectory(path=str(options.initial_directory)))
    if not options.dry_run and options.previous_branch_candidates:
        result.append(PreserveCheckoutHistory(candidates=options.previous_branch_candidates))
    if options.stash_open_changes:
        result.append(RestoreOpenChanges())
    return result

