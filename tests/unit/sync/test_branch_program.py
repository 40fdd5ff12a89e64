"""Tests for planning branch syncs."""

from branchline.core.branches import BranchesSnapshot
from branchline.core.lineage import Lineage
from branchline.sync.branch_program import (
    SyncSettings,
    sync_branch_program,
    sync_branches_program,
)
from branchline.vm.opcodes import (
    Checkout,
    CreateTrackingBranch,
    MergeBranch,
    PushBranch,
    RebaseBranch,
)

LINEAGE = Lineage(parents={"a": "main", "b": "a", "c": "b"})


def _settings(**overrides) -> SyncSettings:
    values = dict(
        strategy="merge",
        remote="origin",
        has_remote=True,
        online=True,
        push=True,
        push_new_branches=False,
        no_verify=False,
        root_branches=frozenset({"main"}),
    )
    values.update(overrides)
    return SyncSettings(**values)


def _branches(*local: str, remote: tuple[str, ...] = ()) -> BranchesSnapshot:
    return BranchesSnapshot(
        current=local[0] if local else None,
        previous=None,
        local=local,
        remote=remote,
        remotes=("origin",),
    )


def test_feature_branch_merges_remote_then_parent_then_pushes() -> None:
    branches = _branches("main", "a", remote=("origin/main", "origin/a"))

    program = sync_branch_program("a", lineage=LINEAGE, branches=branches, settings=_settings())

    assert program.opcodes() == [
        Checkout(branch="a"),
        MergeBranch(branch="origin/a"),
        MergeBranch(branch="main"),
        PushBranch(branch="a", remote="origin"),
    ]


def test_rebase_strategy_force_pushes_feature_branches() -> None:
    branches = _branches("main", "a", remote=("origin/a",))

    program = sync_branch_program(
        "a", lineage=LINEAGE, branches=branches, settings=_settings(strategy="rebase")
    )

    assert program.opcodes() == [
        Checkout(branch="a"),
        RebaseBranch(onto="origin/a"),
        RebaseBranch(onto="main"),
        PushBranch(branch="a", remote="origin", force_with_lease=True),
    ]


def test_root_branch_rebases_onto_its_remote_and_has_no_parent() -> None:
    branches = _branches("main", remote=("origin/main",))

    program = sync_branch_program("main", lineage=LINEAGE, branches=branches, settings=_settings())

    assert program.opcodes() == [
        Checkout(branch="main"),
        RebaseBranch(onto="origin/main"),
        PushBranch(branch="main", remote="origin"),
    ]


def test_offline_sync_never_touches_the_remote() -> None:
    branches = _branches("main", "a", remote=("origin/a",))

    program = sync_branch_program(
        "a", lineage=LINEAGE, branches=branches, settings=_settings(online=False)
    )

    assert program.opcodes() == [Checkout(branch="a"), MergeBranch(branch="main")]


def test_untracked_branch_gets_tracking_branch_when_configured() -> None:
    branches = _branches("main", "a")

    program = sync_branch_program(
        "a", lineage=LINEAGE, branches=branches, settings=_settings(push_new_branches=True)
    )

    assert program.opcodes() == [
        Checkout(branch="a"),
        MergeBranch(branch="main"),
        CreateTrackingBranch(branch="a", remote="origin"),
    ]


def test_untracked_branch_stays_local_by_default() -> None:
    branches = _branches("main", "a")

    program = sync_branch_program("a", lineage=LINEAGE, branches=branches, settings=_settings())

    assert program.opcodes() == [Checkout(branch="a"), MergeBranch(branch="main")]


def test_no_push_skips_pushing_tracked_branches() -> None:
    branches = _branches("main", "a", remote=("origin/a",))

    program = sync_branch_program(
        "a", lineage=LINEAGE, branches=branches, settings=_settings(push=False)
    )

    assert PushBranch(branch="a", remote="origin") not in program.opcodes()


def test_multiple_branches_are_synced_root_to_leaf() -> None:
    branches = _branches("main", "a", "b", "c")

    program = sync_branches_program(
        ["c", "a", "main", "b"], lineage=LINEAGE, branches=branches, settings=_settings()
    )

    checkouts = [op.branch for op in program if isinstance(op, Checkout)]
    assert checkouts == ["main", "a", "b", "c"]


def test_each_branch_absorbs_its_own_parent() -> None:
    branches = _branches("main", "a", "b", "c")

    program = sync_branches_program(
        ["a", "b", "c"], lineage=LINEAGE, branches=branches, settings=_settings()
    )

    assert program.opcodes() == [
        Checkout(branch="a"),
        MergeBranch(branch="main"),
        Checkout(branch="b"),
        MergeBranch(branch="a"),
        Checkout(branch="c"),
        MergeBranch(branch="b"),
    ]


def test_perennial_branches_are_roots() -> None:
    lineage = Lineage(parents={"hotfix": "release"})
    branches = _branches("main", "release", "hotfix")

    program = sync_branches_program(
        ["hotfix", "release"],
        lineage=lineage,
        branches=branches,
        settings=_settings(root_branches=frozenset({"main", "release"})),
    )

    assert program.opcodes() == [
        Checkout(branch="release"),
        Checkout(branch="hotfix"),
        MergeBranch(branch="release"),
    ]
