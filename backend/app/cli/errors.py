"""
CLI-specific error types.

All CLI errors inherit from CLIError for consistent handling.
"""


class CLIError(Exception):
    """Base exception for all CLI-related failures."""

    def __init__(self, message: str, exit_code: int = 4):
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class InputFileError(CLIError):
    """Raised when a path given on the command line cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot read {path}: {reason}", exit_code=4)
