"""Hosting-provider operations subpackage."""

from branchline.core.hosting.abc import HostingDriver
from branchline.core.hosting.types import PullRequestInfo

__all__ = ["HostingDriver", "PullRequestInfo"]
