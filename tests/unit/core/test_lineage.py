"""Tests for the branch lineage."""

from pathlib import Path

import pytest

from branchline.core.git.fake import FakeGit
from branchline.core.lineage import Lineage, is_valid_branch_name, load_lineage

LINEAGE = Lineage(parents={"a": "main", "b": "a", "c": "b", "d": "a"})


def test_ancestors_are_root_first() -> None:
    assert LINEAGE.ancestors("c") == ["main", "a", "b"]
    assert LINEAGE.branch_and_ancestors("c") == ["main", "a", "b", "c"]
    assert LINEAGE.root("c") == "main"


def test_root_has_no_ancestors() -> None:
    assert LINEAGE.ancestors("main") == []
    assert LINEAGE.parent("main") is None


def test_children_are_sorted() -> None:
    assert LINEAGE.children("a") == ["b", "d"]


def test_descendants_in_root_to_leaf_order() -> None:
    assert LINEAGE.descendants("a") == ["b", "c", "d"]


def test_order_hierarchically_deduplicates() -> None:
    assert LINEAGE.order_hierarchically(["d", "c", "a", "c"]) == ["a", "c", "d"]


def test_cycle_does_not_hang() -> None:
    lineage = Lineage(parents={"x": "y", "y": "x"})

    assert lineage.ancestors("x") == ["y"]


def test_with_parent_and_without_return_new_lineages() -> None:
    changed = LINEAGE.with_parent("c", "main").without("d")

    assert changed.parent("c") == "main"
    assert not changed.has_parent("d")
    assert LINEAGE.parent("c") == "b"


def test_load_lineage_reads_parent_keys_only() -> None:
    git = FakeGit(
        config={
            "branchline-branch.feature/x.parent": "main",
            "branchline-branch.empty.parent": "",
            "user.name": "someone",
        }
    )

    lineage = load_lineage(git, Path("/repo"))

    assert lineage.parents == {"feature/x": "main"}


@pytest.mark.parametrize(
    ("name", "valid"),
    [
        ("feature", True),
        ("feature/login", True),
        ("", False),
        ("-x", False),
        ("a..b", False),
        ("has space", False),
        ("ends.lock", False),
        ("bad~name", False),
    ],
)
def test_is_valid_branch_name(name: str, valid: bool) -> None:
    assert is_valid_branch_name(name) is valid
