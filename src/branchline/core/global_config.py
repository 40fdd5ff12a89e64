"""Global configuration data structures and loading.

Provides immutable global config data loaded from ~/.branchline/config.toml.
Loaded eagerly at the CLI entry point and stored in BranchlineContext.
"""

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import tomlkit


def default_root() -> Path:
    return Path.home() / ".branchline"


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    Attributes:
        root: Directory holding per-repository config and run-state files
        offline: When True, workflows skip every remote-touching step
    """

    root: Path
    offline: bool

    @staticmethod
    def defaults() -> "GlobalConfig":
        return GlobalConfig(root=default_root(), offline=False)


GLOBAL_CONFIG_KEYS = ("root", "offline")


class ConfigStore(ABC):
    """Abstract interface for global config operations.

    Provides dependency injection for global config access, enabling
    in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if global config exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load global config.

        Raises:
            FileNotFoundError: If config doesn't exist
            ValueError: If config is malformed
        """
        ...

    @abstractmethod
    def save(self, config: GlobalConfig) -> None:
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the global config file (for messages)."""
        ...

    def load_or_defaults(self) -> GlobalConfig:
        if not self.exists():
            return GlobalConfig.defaults()
        return self.load()


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads/writes ~/.branchline/config.toml."""

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GlobalConfig:
        config_path = self.path()
        if not config_path.exists():
            raise FileNotFoundError(f"Global config not found at {config_path}")

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Malformed config at {config_path}: {e}") from e

        root = data.get("root")
        offline = data.get("offline", False)
        if not isinstance(offline, bool):
            raise ValueError(f"'offline' must be true or false in {config_path}")
        return GlobalConfig(
            root=Path(root).expanduser().resolve() if root else default_root(),
            offline=offline,
        )

    def save(self, config: GlobalConfig) -> None:
        config_path = self.path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        doc.add(tomlkit.comment("Global branchline configuration"))
        doc["root"] = str(config.root)
        doc["offline"] = config.offline
        config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")

    def path(self) -> Path:
        return default_root() / "config.toml"


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GlobalConfig:
        if self._config is None:
            raise FileNotFoundError(f"Global config not found at {self.path()}")
        return self._config

    def save(self, config: GlobalConfig) -> None:
        self._config = config

    def path(self) -> Path:
        return Path("/fake/branchline/config.toml")
