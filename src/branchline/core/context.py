"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click

from branchline.cli.config import RepoConfig, load_repo_config
from branchline.cli.output import user_output
from branchline.core.git.abc import Git
from branchline.core.git.dry_run import DryRunGit
from branchline.core.git.real import RealGit
from branchline.core.global_config import ConfigStore, FilesystemConfigStore, GlobalConfig
from branchline.core.hosting.abc import HostingDriver
from branchline.core.hosting.dry_run import DryRunHostingDriver
from branchline.core.hosting.real import RealGitHubDriver
from branchline.core.repo_discovery import NoRepoSentinel, RepoContext, discover_repo_or_sentinel
from branchline.core.resume_prompt import InteractiveResumePrompt, ResumePrompt
from branchline.core.time.abc import Time
from branchline.core.time.real import RealTime
from branchline.vm.statefile import FileRunStateStore, RunStateStore


@dataclass(frozen=True)
class BranchlineContext:
    """Immutable context holding all dependencies for branchline operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.

    `hosting` is None when no hosting platform is configured for the repository.
    """

    git: Git
    hosting: HostingDriver | None
    time: Time
    config_store: ConfigStore
    runstate_store: RunStateStore
    resume_prompt: ResumePrompt
    cwd: Path  # Current working directory at CLI invocation
    global_config: GlobalConfig
    repo_config: RepoConfig
    repo: RepoContext | NoRepoSentinel
    dry_run: bool

    @property
    def is_offline(self) -> bool:
        return self.global_config.offline

    @property
    def main_branch(self) -> str | None:
        """The configured main branch, falling back to git's trunk detection."""
        if self.repo_config.main_branch is not None:
            return self.repo_config.main_branch
        if isinstance(self.repo, NoRepoSentinel):
            return None
        return self.git.get_trunk_branch(self.repo.root)

    @staticmethod
    def for_test(
        git: Git | None = None,
        hosting: HostingDriver | None = None,
        time: Time | None = None,
        config_store: ConfigStore | None = None,
        runstate_store: RunStateStore | None = None,
        resume_prompt: ResumePrompt | None = None,
        cwd: Path | None = None,
        global_config: GlobalConfig | None = None,
        repo_config: RepoConfig | None = None,
        repo: RepoContext | NoRepoSentinel | None = None,
        dry_run: bool = False,
    ) -> "BranchlineContext":
        """Create test context with optional pre-configured integration classes.

        Any unspecified dependency gets its in-memory test default. `hosting`
        stays None unless given, matching a repository without a hosting platform.

        Example:
            >>> git = FakeGit(repo_root=Path("/repo"), branches={"main": "a1"})
            >>> ctx = BranchlineContext.for_test(git=git, repo=repo_context_for(...))
        """
        from tests.fakes.resume_prompt import ScriptedResumePrompt
        from tests.fakes.time import FakeTime
        from tests.test_utils.paths import sentinel_path

        from branchline.core.git.fake import FakeGit
        from branchline.core.global_config import InMemoryConfigStore
        from branchline.vm.statefile import InMemoryRunStateStore

        if git is None:
            git = FakeGit()

        if time is None:
            time = FakeTime()

        if runstate_store is None:
            runstate_store = InMemoryRunStateStore()

        if resume_prompt is None:
            resume_prompt = ScriptedResumePrompt([])

        if global_config is None:
            global_config = GlobalConfig(root=Path("/test/branchline"), offline=False)

        if config_store is None:
            config_store = InMemoryConfigStore(config=global_config)

        if repo_config is None:
            repo_config = RepoConfig()

        if repo is None:
            repo = NoRepoSentinel()

        # Apply dry-run wrappers if needed (matching production behavior)
        if dry_run:
            git = DryRunGit(git)
            if hosting is not None:
                hosting = DryRunHostingDriver(hosting)

        return BranchlineContext(
            git=git,
            hosting=hosting,
            time=time,
            config_store=config_store,
            runstate_store=runstate_store,
            resume_prompt=resume_prompt,
            cwd=cwd or sentinel_path(),
            global_config=global_config,
            repo_config=repo_config,
            repo=repo,
            dry_run=dry_run,
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        (Path, None) on success, (None, error_message) if the directory is gone

    Note:
        This is an acceptable use of try/except since we're wrapping a third-party
        API (Path.cwd()) that provides no way to check the condition first.
    """
    try:
        return (Path.cwd(), None)
    except (FileNotFoundError, OSError):
        return (None, "Current working directory no longer exists")


def _config_error(message: str) -> NoReturn:
    user_output(click.style("Error: ", fg="red") + message)
    raise SystemExit(1)


def create_context(*, dry_run: bool) -> BranchlineContext:
    """Create production context with real implementations.

    Args:
        dry_run: If True, wrap git and hosting with dry-run wrappers that
                 skip every mutating operation

    Returns:
        BranchlineContext with real implementations
    """
    # 1. Capture cwd (no deps)
    cwd, error_msg = safe_cwd()
    if cwd is None:
        assert error_msg is not None
        _config_error(error_msg + "\nPlease change to a valid directory and try again.")

    # 2. Load global config, defaults when the file does not exist yet
    config_store = FilesystemConfigStore()
    try:
        global_config = config_store.load_or_defaults()
    except ValueError as e:
        _config_error(str(e))

    # 3. Discover repo (only needs cwd, root, git)
    git: Git = RealGit()
    repo = discover_repo_or_sentinel(cwd, global_config.root, git)

    # 4. Load repo config (or defaults if no repo)
    repo_config = RepoConfig()
    if isinstance(repo, RepoContext):
        try:
            repo_config = load_repo_config(repo.repo_dir)
        except ValueError as e:
            _config_error(str(e))

    hosting: HostingDriver | None = None
    if repo_config.hosting_platform == "github":
        hosting = RealGitHubDriver()

    # 5. Apply dry-run wrappers if needed
    if dry_run:
        git = DryRunGit(git)
        if hosting is not None:
            hosting = DryRunHostingDriver(hosting)

    return BranchlineContext(
        git=git,
        hosting=hosting,
        time=RealTime(),
        config_store=config_store,
        runstate_store=FileRunStateStore(global_config.root / "runstate"),
        resume_prompt=InteractiveResumePrompt(),
        cwd=cwd,
        global_config=global_config,
        repo_config=repo_config,
        repo=repo,
        dry_run=dry_run,
    )
