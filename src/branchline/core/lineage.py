"""Parent/child relationships between branches.

Lineage is stored in git config as `branchline-branch.<name>.parent = <parent>`
so it travels with the repository and is written through the Git capability
(which makes dry-run runs leave it untouched).
"""

import re
from dataclasses import dataclass
from pathlib import Path

from branchline.core.git.abc import Git

PARENT_KEY_PREFIX = "branchline-branch."
PARENT_KEY_SUFFIX = ".parent"
PARENT_KEY_PATTERN = r"^branchline-branch\..+\.parent$"


def parent_config_key(branch: str) -> str:
    """Return the git config key holding the parent of `branch`."""
    return f"{PARENT_KEY_PREFIX}{branch}{PARENT_KEY_SUFFIX}"


def _branch_from_key(key: str) -> str | None:
    if not key.startswith(PARENT_KEY_PREFIX) or not key.endswith(PARENT_KEY_SUFFIX):
        return None
    branch = key[len(PARENT_KEY_PREFIX) : -len(PARENT_KEY_SUFFIX)]
    return branch or None


@dataclass(frozen=True)
class Lineage:
    """Immutable snapshot of the branch forest.

    `parents` maps each feature branch to its immediate parent. Branches without
    an entry are roots (main and perennial branches, or untracked branches).
    """

    parents: dict[str, str]

    def parent(self, branch: str) -> str | None:
        return self.parents.get(branch)

    def has_parent(self, branch: str) -> bool:
        return branch in self.parents

    def children(self, branch: str) -> list[str]:
        return sorted(child for child, parent in self.parents.items() if parent == branch)

    def ancestors(self, branch: str) -> list[str]:
        """Return the ancestors of `branch`, root first.

        A cycle in the stored lineage ends the walk at the first repeated branch.
        """
        chain: list[str] = []
        seen = {branch}
        current = self.parents.get(branch)
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            current = self.parents.get(current)
        chain.reverse()
        return chain

    def branch_and_ancestors(self, branch: str) -> list[str]:
        """Return `branch` preceded by its ancestors, root first."""
        return [*self.ancestors(branch), branch]

    def root(self, branch: str) -> str:
        return self.branch_and_ancestors(branch)[0]

    def descendants(self, branch: str) -> list[str]:
        """Return every descendant of `branch` in root-to-leaf order."""
        result: list[str] = []
        pending = self.children(branch)
        while pending:
            child = pending.pop(0)
            if child in result:
                continue
            result.append(child)
            pending.extend(self.children(child))
        return self.order_hierarchically(result)

    def order_hierarchically(self, branches: list[str]) -> list[str]:
        """Sort branches so every ancestor comes before its descendants.

        Sorting by the root-first path of each branch yields a depth-first
        pre-order of the forest with siblings in name order.
        """
        return sorted(dict.fromkeys(branches), key=self.branch_and_ancestors)

    def with_parent(self, branch: str, parent: str) -> "Lineage":
        return Lineage(parents={**self.parents, branch: parent})

    def without(self, branch: str) -> "Lineage":
        return Lineage(parents={k: v for k, v in self.parents.items() if k != branch})


def load_lineage(git: Git, repo_root: Path) -> Lineage:
    """Read all parent entries from the repository's git config."""
    entries = git.get_config_regexp(repo_root, PARENT_KEY_PATTERN)
    parents: dict[str, str] = {}
    for key, value in entries.items():
        branch = _branch_from_key(key)
        if branch is None or not value:
            continue
        parents[branch] = value
    return Lineage(parents=parents)


def is_valid_branch_name(name: str) -> bool:
    """Cheap pre-flight check for names git would reject outright."""
    if not name or name.startswith("-") or name.endswith("/") or name.endswith(".lock"):
        return False
    if ".." in name or "@{" in name or "//" in name:
        return False
    return re.search(r"[\s~^:?*\[\\]", name) is None
