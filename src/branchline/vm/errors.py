"""Exception hierarchy for workflow execution.

The interpreter is the single place that decides whether an error halts a
run (and whether the halt is skippable) or aborts the process:

- ConflictError: the version-control tool left unresolved content conflicts.
  Halts the run; the failing opcode may be skippable.
- OperationError: any other failure an opcode reports itself. Halts the run;
  never skippable. Subprocess failures surface as RuntimeError and are treated
  the same way.
- ProtocolError: the persisted state or the resume dialog is not usable.
  Fatal; persisted state is left untouched for inspection.
"""


class BranchlineError(Exception):
    """Base class for all branchline errors."""


class ConflictError(BranchlineError):
    """Raised when a git operation stops with unresolved conflicts."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        message = f"{operation} stopped with unresolved conflicts"
        if detail:
            message += f"\n{detail}"
        super().__init__(message)


class OperationError(BranchlineError):
    """Raised by an opcode when it cannot complete for a non-conflict reason."""


class ProtocolError(BranchlineError):
    """Base class for fatal errors in the resume protocol."""


class UnexpectedResponseError(ProtocolError):
    """Raised when the resume prompt returns something other than a known response."""

    def __init__(self, response: object) -> None:
        self.response = response
        super().__init__(f"Unexpected response from resume prompt: {response!r}")


class RunStateCorruptError(ProtocolError):
    """Raised when a persisted run state cannot be decoded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read run state at {path}: {reason}")
