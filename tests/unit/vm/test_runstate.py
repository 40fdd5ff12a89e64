"""Tests for run-state encoding and persistence."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from branchline.vm.errors import RunStateCorruptError
from branchline.vm.opcodes import Checkout, ContinueRebase, PushBranch, SetParent
from branchline.vm.program import Program
from branchline.vm.runstate import RunState, UnfinishedDetails
from branchline.vm.statefile import FileRunStateStore, InMemoryRunStateStore

REPO_ROOT = Path("/home/me/code/app")


def _halted_state() -> RunState:
    return RunState(
        command="sync",
        dry_run=False,
        initial_active_branch="feature",
        pending_program=Program(
            [ContinueRebase(current="feature", sha_before="f1"), PushBranch("feature", "origin")]
        ),
        executed_program=[Checkout(branch="feature", previous="main")],
        unfinished_details=UnfinishedDetails(
            end_branch="feature",
            end_time=datetime(2024, 1, 15, 14, 30, tzinfo=UTC),
            can_skip=True,
        ),
    )


def test_file_store_round_trip(tmp_path: Path) -> None:
    store = FileRunStateStore(tmp_path / "runstate")
    state = _halted_state()

    store.save(REPO_ROOT, state)
    loaded = store.load(REPO_ROOT)

    assert loaded == state
    assert store.path_for(REPO_ROOT) == tmp_path / "runstate" / "home-me-code-app.json"


def test_file_store_writes_documented_layout(tmp_path: Path) -> None:
    store = FileRunStateStore(tmp_path)
    store.save(REPO_ROOT, _halted_state())

    data = json.loads(store.path_for(REPO_ROOT).read_text(encoding="utf-8"))

    assert data["command"] == "sync"
    assert data["pending_program"][0] == {
        "type": "ContinueRebase",
        "data": {"current": "feature", "sha_before": "f1"},
    }
    assert data["unfinished_details"] == {
        "end_branch": "feature",
        "end_time": "2024-01-15T14:30:00+00:00",
        "can_skip": True,
    }


def test_file_store_load_missing_returns_none(tmp_path: Path) -> None:
    assert FileRunStateStore(tmp_path).load(REPO_ROOT) is None


def test_file_store_delete_is_idempotent(tmp_path: Path) -> None:
    store = FileRunStateStore(tmp_path)
    store.save(REPO_ROOT, _halted_state())

    store.delete(REPO_ROOT)
    store.delete(REPO_ROOT)

    assert store.load(REPO_ROOT) is None


def test_unreadable_json_is_a_protocol_error_and_file_is_kept(tmp_path: Path) -> None:
    store = FileRunStateStore(tmp_path)
    path = store.path_for(REPO_ROOT)
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RunStateCorruptError):
        store.load(REPO_ROOT)
    assert path.exists()


def test_unknown_opcode_type_is_a_protocol_error(tmp_path: Path) -> None:
    store = FileRunStateStore(tmp_path)
    payload = _halted_state().to_dict()
    payload["pending_program"].append({"type": "Teleport", "data": {}})
    store.path_for(REPO_ROOT).write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(RunStateCorruptError, match="Teleport"):
        store.load(REPO_ROOT)


def test_finished_state_has_no_unfinished_details() -> None:
    state = _halted_state()
    state.mark_finished()

    assert not state.is_unfinished
    assert not state.can_skip
    assert RunState.from_dict(state.to_dict()).unfinished_details is None


def test_in_memory_store_keeps_states_per_repository() -> None:
    other_root = Path("/other")
    state = RunState(
        command="hack",
        dry_run=True,
        initial_active_branch="main",
        pending_program=Program([SetParent(branch="x", parent="main")]),
    )
    store = InMemoryRunStateStore(states={other_root: state})

    assert store.load(REPO_ROOT) is None
    assert store.load(other_root) == state
    assert store.saved_roots == [other_root]


def test_from_dict_rejects_missing_command() -> None:
    with pytest.raises(ValueError, match="missing command"):
        RunState.from_dict({"dry_run": False})
