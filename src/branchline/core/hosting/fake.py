"""Fake hosting driver for testing."""

from pathlib import Path

from branchline.core.hosting.abc import HostingDriver
from branchline.core.hosting.types import PullRequestInfo


class FakeHostingDriver(HostingDriver):
    """In-memory fake implementation of hosting operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty dicts).
    """

    def __init__(
        self,
        *,
        pull_requests: dict[str, PullRequestInfo] | None = None,
        merge_failures: set[int] | None = None,
    ) -> None:
        """Create FakeHostingDriver with pre-configured state.

        Args:
            pull_requests: Mapping of head branch name -> open pull request
            merge_failures: Pull request numbers whose merge is rejected
        """
        self._pull_requests = pull_requests or {}
        self._merge_failures = merge_failures or set()
        self._merged: list[tuple[str, str, int, str]] = []
        self._base_updates: list[tuple[int, str]] = []

    def find_pull_request(
        self, repo_root: Path, branch: str, base: str
    ) -> PullRequestInfo | None:
        pr = self._pull_requests.get(branch)
        if pr is None or pr.base_branch != base:
            return None
        return pr

    def merge_pull_request(
        self, repo_root: Path, branch: str, parent: str, number: int, message: str
    ) -> None:
        if number in self._merge_failures:
            msg = f"Failed to merge pull request #{number}"
            raise RuntimeError(msg)
        self._merged.append((branch, parent, number, message))

    def update_pull_request_base(self, repo_root: Path, number: int, new_base: str) -> None:
        self._base_updates.append((number, new_base))

    @property
    def merged_pull_requests(self) -> list[tuple[str, str, int, str]]:
        """Get (branch, parent, number, message) for every merge call.

        This property is for test assertions only.
        """
        return self._merged.copy()

    @property
    def base_updates(self) -> list[tuple[int, str]]:
        """Get (number, new_base) for every base update call.

        This property is for test assertions only.
        """
        return self._base_updates.copy()
