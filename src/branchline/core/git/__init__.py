"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes and dry-run via wrappers.
"""

from branchline.core.git.abc import Git
from branchline.core.git.dry_run import DryRunGit
from branchline.core.git.printing import PrintingGit
from branchline.core.git.real import RealGit

__all__ = [
    "Git",
    "RealGit",
    "DryRunGit",
    "PrintingGit",
]
