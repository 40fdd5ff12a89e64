"""Load, save and delete the run state of a repository.

There is at most one run state per repository root. The file store keeps it
as JSON under `<root>/runstate/<sanitized repo root>.json`.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from branchline.core.repo_discovery import sanitize_repo_root
from branchline.vm.errors import RunStateCorruptError
from branchline.vm.runstate import RunState

logger = logging.getLogger(__name__)


class RunStateStore(ABC):
    """Abstract persistence for run states, keyed by repository root."""

    @abstractmethod
    def load(self, repo_root: Path) -> RunState | None:
        """Load the persisted run state.

        Returns:
            None when nothing is persisted. A returned state is finished or
            unfinished depending on `unfinished_details`.

        Raises:
            RunStateCorruptError: If the persisted state cannot be decoded
        """
        ...

    @abstractmethod
    def save(self, repo_root: Path, state: RunState) -> None:
        """Persist the run state, replacing any previous one."""
        ...

    @abstractmethod
    def delete(self, repo_root: Path) -> None:
        """Remove the persisted run state if there is one."""
        ...


class FileRunStateStore(RunStateStore):
    """Production implementation storing one JSON file per repository."""

    def __init__(self, state_dir: Path) -> None:
        self._state_dir = state_dir

    def path_for(self, repo_root: Path) -> Path:
        return self._state_dir / f"{sanitize_repo_root(repo_root)}.json"

    def load(self, repo_root: Path) -> RunState | None:
        path = self.path_for(repo_root)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return RunState.from_dict(data)
        except (json.JSONDecodeError, ValueError) as e:
            raise RunStateCorruptError(str(path), str(e)) from e

    def save(self, repo_root: Path, state: RunState) -> None:
        path = self.path_for(repo_root)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(state.to_dict(), indent=2) + "\n", encoding="utf-8")
        tmp_path.replace(path)
        logger.debug("Saved run state for %s to %s", repo_root, path)

    def delete(self, repo_root: Path) -> None:
        path = self.path_for(repo_root)
        if path.exists():
            path.unlink()
            logger.debug("Deleted run state %s", path)


class InMemoryRunStateStore(RunStateStore):
    """Test implementation that keeps serialized states in memory.

    States are stored in their JSON form so every save and load exercises
    the same encoding the file store uses.
    """

    def __init__(self, states: dict[Path, RunState] | None = None) -> None:
        self._states: dict[Path, str] = {}
        for repo_root, state in (states or {}).items():
            self._states[repo_root] = json.dumps(state.to_dict())

    def load(self, repo_root: Path) -> RunState | None:
        raw = self._states.get(repo_root)
        if raw is None:
            return None
        try:
            return RunState.from_dict(json.loads(raw))
        except (json.JSONDecodeError, ValueError) as e:
            raise RunStateCorruptError(f"<memory:{repo_root}>", str(e)) from e

    def save(self, repo_root: Path, state: RunState) -> None:
        self._states[repo_root] = json.dumps(state.to_dict())

    def delete(self, repo_root: Path) -> None:
        self._states.pop(repo_root, None)

    @property
    def saved_roots(self) -> list[Path]:
        """Repository roots with a persisted state.

        This property is for test assertions only.
        """
        return list(self._states)
