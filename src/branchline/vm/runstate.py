"""The durable record of one workflow invocation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from branchline.vm.opcodes import Opcode, opcode_from_dict
from branchline.vm.program import Program


@dataclass(frozen=True)
class UnfinishedDetails:
    """Where and when a halted run stopped."""

    end_branch: str | None
    end_time: datetime
    can_skip: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "end_branch": self.end_branch,
            "end_time": self.end_time.isoformat(),
            "can_skip": self.can_skip,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "UnfinishedDetails":
        end_branch = data.get("end_branch")
        can_skip = data.get("can_skip")
        if end_branch is not None and not isinstance(end_branch, str):
            raise ValueError("end_branch must be a string or null")
        if not isinstance(can_skip, bool):
            raise ValueError("can_skip must be true or false")
        return UnfinishedDetails(
            end_branch=end_branch,
            end_time=datetime.fromisoformat(str(data.get("end_time"))),
            can_skip=can_skip,
        )


@dataclass
class RunState:
    """Checkpoint of a workflow run.

    `pending_program` holds exactly the opcodes that have not completed yet.
    `executed_program` holds snapshots of the opcodes that did complete, in
    execution order; it is what Undo reverses.
    """

    command: str
    dry_run: bool
    initial_active_branch: str | None
    pending_program: Program
    executed_program: list[Opcode] = field(default_factory=list)
    unfinished_details: UnfinishedDetails | None = None

    @property
    def is_unfinished(self) -> bool:
        return self.unfinished_details is not None

    @property
    def can_skip(self) -> bool:
        return self.unfinished_details is not None and self.unfinished_details.can_skip

    def mark_finished(self) -> None:
        self.unfinished_details = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "dry_run": self.dry_run,
            "initial_active_branch": self.initial_active_branch,
            "pending_program": [opcode.to_dict() for opcode in self.pending_program],
            "executed_program": [opcode.to_dict() for opcode in self.executed_program],
            "unfinished_details": (
                self.unfinished_details.to_dict() if self.unfinished_details is not None else None
            ),
        }

    @staticmethod
    def from_dict(data: object) -> "RunState":
        """Decode a run state.

        Raises:
            ValueError: If any part of the payload is malformed
        """
        if not isinstance(data, dict):
            raise ValueError("run state must be a JSON object")
        command = data.get("command")
        if not isinstance(command, str) or not command:
            raise ValueError("missing command")
        dry_run = data.get("dry_run", False)
        if not isinstance(dry_run, bool):
            raise ValueError("dry_run must be true or false")
        initial = data.get("initial_active_branch")
        if initial is not None and not isinstance(initial, str):
            raise ValueError("initial_active_branch must be a string or null")
        pending = data.get("pending_program", [])
        executed = data.get("executed_program", [])
        if not isinstance(pending, list) or not isinstance(executed, list):
            raise ValueError("programs must be JSON arrays")
        details = data.get("unfinished_details")
        if details is not None and not isinstance(details, dict):
            raise ValueError("unfinished_details must be an object or null")

        return RunState(
            command=command,
            dry_run=dry_run,
            initial_active_branch=initial,
            pending_program=Program(opcode_from_dict(entry) for entry in pending),
            executed_program=[opcode_from_dict(entry) for entry in executed],
            unfinished_details=(
                UnfinishedDetails.from_dict(details) if details is not None else None
            ),
        )
