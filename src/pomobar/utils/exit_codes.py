"""
Exit codes for Pomobar.

Semantic exit codes so that status-bar scripts and shell hooks can tell
a stopped timer apart from a bad invocation.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments, unknown command token or bad configuration
ERROR_INVALID_ARGS = 2

# The timer process is not running (or its state is stale)
ERROR_NOT_FOUND = 5

# Permission denied while touching state or config files
ERROR_PERMISSION_DENIED = 6

# Another timer process already owns the state file
ERROR_CONFLICT = 7


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_PERMISSION_DENIED: "ERROR_PERMISSION_DENIED",
        ERROR_CONFLICT: "ERROR_CONFLICT",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_NOT_FOUND: "Timer process is not running - start it with 'pomobar run'",
        ERROR_PERMISSION_DENIED: "Permission denied",
        ERROR_CONFLICT: "Another timer process is already running",
    }
    return descriptions.get(code, "Unknown error")
