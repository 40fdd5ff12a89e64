import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Literal

import tomlkit

SyncStrategy = Literal["merge", "rebase"]
SYNC_STRATEGIES: tuple[SyncStrategy, ...] = ("merge", "rebase")
HOSTING_PLATFORMS = ("github",)


@dataclass(frozen=True)
class RepoConfig:
    """In-memory representation of the per-repository `config.toml`.

    Example config:
      main_branch = "main"
      perennial_branches = ["release"]
      sync_strategy = "rebase"
      push_new_branches = true
      hosting_platform = "github"
      ship_via_api = true
    """

    main_branch: str | None = None
    perennial_branches: tuple[str, ...] = ()
    sync_strategy: SyncStrategy = "merge"
    push_new_branches: bool = False
    sync_pushes: bool = True
    push_hook: bool = True
    remote: str = "origin"
    ship_delete_remote_branch: bool = True
    ship_via_api: bool = False
    hosting_platform: str | None = None

    def root_branches(self, main_branch: str) -> frozenset[str]:
        """Main and perennial branches are roots; they never get a parent."""
        return frozenset({main_branch, *self.perennial_branches})


REPO_CONFIG_KEYS = tuple(f.name for f in fields(RepoConfig))
_BOOL_KEYS = frozenset(
    {"push_new_branches", "sync_pushes", "push_hook", "ship_delete_remote_branch", "ship_via_api"}
)


def load_repo_config(config_dir: Path) -> RepoConfig:
    """Load config.toml from the given directory if present; otherwise return defaults.

    Raises:
        ValueError: If the file is malformed or holds invalid values
    """
    cfg_path = config_dir / "config.toml"
    if not cfg_path.exists():
        return RepoConfig()

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Malformed config at {cfg_path}: {e}") from e

    config = RepoConfig()
    for key, value in data.items():
        if key not in REPO_CONFIG_KEYS:
            continue
        config = replace(config, **{key: _coerce(key, value, cfg_path)})
    return config


def _coerce(key: str, value: object, source: Path) -> object:
    if key in _BOOL_KEYS:
        if not isinstance(value, bool):
            raise ValueError(f"'{key}' must be true or false in {source}")
        return value
    if key == "perennial_branches":
        if not isinstance(value, list):
            raise ValueError(f"'{key}' must be a list of branch names in {source}")
        return tuple(str(x) for x in value)
    if key == "sync_strategy":
        if value not in SYNC_STRATEGIES:
            raise ValueError(f"'{key}' must be one of {', '.join(SYNC_STRATEGIES)} in {source}")
        return value
    if key == "hosting_platform":
        if value not in HOSTING_PLATFORMS:
            raise ValueError(f"'{key}' must be one of {', '.join(HOSTING_PLATFORMS)} in {source}")
        return value
    return str(value)


def save_repo_config(config_dir: Path, config: RepoConfig) -> None:
    """Save RepoConfig to config.toml, preserving formatting and comments.

    Values equal to the defaults are only written when already present.
    """
    config_dir.mkdir(parents=True, exist_ok=True)
    cfg_path = config_dir / "config.toml"

    if cfg_path.exists():
        doc = tomlkit.parse(cfg_path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()

    defaults = RepoConfig()
    for key in REPO_CONFIG_KEYS:
        value = getattr(config, key)
        if value == getattr(defaults, key) and key not in doc:
            continue
        if value is None:
            if key in doc:
                del doc[key]
            continue
        if isinstance(value, tuple):
            value = list(value)
        doc[key] = value

    cfg_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def parse_config_value(key: str, raw: str) -> object:
    """Parse a command-line value for `key`.

    Raises:
        ValueError: If the key is unknown or the value does not fit it
    """
    if key not in REPO_CONFIG_KEYS:
        raise ValueError(f"Unknown config key '{key}'")
    if key in _BOOL_KEYS:
        lowered = raw.strip().lower()
        if lowered in ("true", "yes", "1", "on"):
            return True
        if lowered in ("false", "no", "0", "off"):
            return False
        raise ValueError(f"'{key}' must be true or false, got '{raw}'")
    if key == "perennial_branches":
        return tuple(part for part in (p.strip() for p in raw.split(",")) if part)
    if key in ("main_branch", "hosting_platform") and raw == "":
        return None
    return _coerce(key, raw, Path("<command line>"))


def format_config_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, tuple):
        return ",".join(value)
    return str(value)
