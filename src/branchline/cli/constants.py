"""Shared constants for branchline CLI commands."""

# A run stopped midway and saved its state; `branchline continue|skip|undo` resume it.
EXIT_CODE_HALTED = 3

# The saved run state or the resume dialog could not be used. The state file is kept.
EXIT_CODE_PROTOCOL_ERROR = 4

DEBUG_ENV_VAR = "BRANCHLINE_DEBUG"
