"""Type definitions for hosting-provider operations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PullRequestInfo:
    """Information about an open pull request."""

    number: int
    title: str
    url: str
    base_branch: str

    @property
    def default_commit_message(self) -> str:
        """Squash commit message used when shipping without an explicit message."""
        return f"{self.title} (#{self.number})"
