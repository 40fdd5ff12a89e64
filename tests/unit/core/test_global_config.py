"""Tests for loading and saving the global config file."""

from pathlib import Path

import pytest

from branchline.core.global_config import FilesystemConfigStore, GlobalConfig, InMemoryConfigStore


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def test_missing_file_falls_back_to_defaults(home: Path) -> None:
    store = FilesystemConfigStore()

    assert not store.exists()
    config = store.load_or_defaults()
    assert config.root == home / ".branchline"
    assert config.offline is False


def test_save_then_load(home: Path) -> None:
    store = FilesystemConfigStore()
    store.save(GlobalConfig(root=home / "elsewhere", offline=True))

    assert store.path() == home / ".branchline" / "config.toml"
    text = store.path().read_text(encoding="utf-8")
    assert "offline = true" in text

    loaded = store.load()
    assert loaded.root == (home / "elsewhere").resolve()
    assert loaded.offline is True


def test_malformed_file_raises_value_error(home: Path) -> None:
    path = home / ".branchline" / "config.toml"
    path.parent.mkdir(parents=True)
    path.write_text("offline = [", encoding="utf-8")

    with pytest.raises(ValueError, match="Malformed config"):
        FilesystemConfigStore().load()


def test_offline_must_be_boolean(home: Path) -> None:
    path = home / ".branchline" / "config.toml"
    path.parent.mkdir(parents=True)
    path.write_text('offline = "yes"\n', encoding="utf-8")

    with pytest.raises(ValueError, match="'offline' must be true or false"):
        FilesystemConfigStore().load()


def test_in_memory_store_without_config() -> None:
    store = InMemoryConfigStore()

    assert not store.exists()
    assert store.load_or_defaults().offline is False
    with pytest.raises(FileNotFoundError):
        store.load()
