"""Tests for Program composition and wrapping."""

from pathlib import Path

from branchline.vm.opcodes import (
    ChangeDirectory,
    Checkout,
    MergeBranch,
    PreserveCheckoutHistory,
    RestoreOpenChanges,
    StashOpenChanges,
)
from branchline.vm.program import Program, WrapOptions, wrap


def test_program_keeps_insertion_order_and_duplicates() -> None:
    program = Program()
    program.append(Checkout(branch="a"))
    program.append_all([MergeBranch(branch="main"), Checkout(branch="a")])

    assert program.opcodes() == [
        Checkout(branch="a"),
        MergeBranch(branch="main"),
        Checkout(branch="a"),
    ]


def test_prepend_all_puts_opcodes_in_front() -> None:
    program = Program([Checkout(branch="b")])

    program.prepend_all([Checkout(branch="x"), Checkout(branch="y")])

    assert program.pop() == Checkout(branch="x")
    assert program.peek() == Checkout(branch="y")
    assert len(program) == 2


def test_empty_program() -> None:
    program = Program()

    assert program.is_empty()
    assert program.peek() is None


def test_wrap_with_all_options_brackets_program_symmetrically() -> None:
    program = Program([Checkout(branch="feature")])

    wrapped = wrap(
        program,
        WrapOptions(
            run_in_repo_root=True,
            stash_open_changes=True,
            previous_branch_candidates=("main",),
            initial_directory=Path("/repo/sub"),
            repo_root=Path("/repo"),
        ),
    )

    assert wrapped.opcodes() == [
        StashOpenChanges(),
        ChangeDirectory(path="/repo"),
        Checkout(branch="feature"),
        ChangeDirectory(path="/repo/sub"),
        PreserveCheckoutHistory(candidates=("main",)),
        RestoreOpenChanges(),
    ]


def test_wrap_skips_directory_change_when_already_in_root() -> None:
    wrapped = wrap(
        Program([Checkout(branch="feature")]),
        WrapOptions(
            run_in_repo_root=True, initial_directory=Path("/repo"), repo_root=Path("/repo")
        ),
    )

    assert wrapped.opcodes() == [Checkout(branch="feature")]


def test_wrap_leaves_checkout_history_alone_in_dry_run() -> None:
    wrapped = wrap(
        Program([Checkout(branch="feature")]),
        WrapOptions(dry_run=True, previous_branch_candidates=("main",)),
    )

    assert wrapped.opcodes() == [Checkout(branch="feature")]
