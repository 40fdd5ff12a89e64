"""Production hosting driver for GitHub using the gh CLI."""

import json
from pathlib import Path

from branchline.core.hosting.abc import HostingDriver
from branchline.core.hosting.types import PullRequestInfo
from branchline.core.subprocess import run_subprocess_with_context


class RealGitHubDriver(HostingDriver):
    """Production implementation using gh CLI.

    All GitHub operations execute actual gh commands via subprocess.
    """

    def find_pull_request(
        self, repo_root: Path, branch: str, base: str
    ) -> PullRequestInfo | None:
        """Find the open pull request for branch against base.

        Note: Uses try/except as an acceptable error boundary for handling gh CLI
        availability and authentication. We cannot reliably check gh installation
        and authentication status a priori without duplicating gh's logic.
        """
        cmd = [
            "gh",
            "pr",
            "list",
            "--head",
            branch,
            "--base",
            base,
            "--state",
            "open",
            "--json",
            "number,title,url,baseRefName",
        ]
        try:
            result = run_subprocess_with_context(
                cmd,
                operation_context=f"find pull request for '{branch}'",
                cwd=repo_root,
            )
            data = json.loads(result.stdout or "[]")
        except (RuntimeError, json.JSONDecodeError):
            # gh not installed, not authenticated, or JSON parsing failed
            return None

        if len(data) != 1:
            return None

        pr = data[0]
        return PullRequestInfo(
            number=int(pr["number"]),
            title=str(pr.get("title", "")),
            url=str(pr.get("url", "")),
            base_branch=str(pr.get("baseRefName", base)),
        )

    def merge_pull_request(
        self, repo_root: Path, branch: str, parent: str, number: int, message: str
    ) -> None:
        """Squash-merge a pull request on GitHub via gh CLI."""
        subject, _, body = message.partition("\n")
        cmd = ["gh", "pr", "merge", str(number), "--squash", "--subject", subject.strip()]
        if body.strip():
            cmd.extend(["--body", body.strip()])
        run_subprocess_with_context(
            cmd,
            operation_context=f"merge pull request #{number} ({branch} into {parent})",
            cwd=repo_root,
        )

    def update_pull_request_base(self, repo_root: Path, number: int, new_base: str) -> None:
        """Update base branch of a PR on GitHub."""
        run_subprocess_with_context(
            ["gh", "pr", "edit", str(number), "--base", new_base],
            operation_context=f"update base of pull request #{number} to '{new_base}'",
            cwd=repo_root,
        )
