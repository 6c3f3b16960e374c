"""
Batch intake error types.

All errors inherit from BatchError for easy catching.
None of them are fatal: each one is scoped to a single user action
and the action can be repeated.
"""


class BatchError(Exception):
    """Base exception for all batch intake and submission failures."""
    pass


class CompositionInvalid(BatchError):
    """Raised when the registry and options cannot form a job request."""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(reason.message)


class SubmissionFailed(BatchError):
    """Wraps the error raised by the external job creator."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        message = str(cause) or type(cause).__name__
        super().__init__(f"Failed to create batch job: {message}")


class SubmissionInProgressError(BatchError):
    """Raised when the registry is touched while a submission is in flight."""

    def __init__(self, action: str = "submit"):
        self.action = action
        super().__init__(
            f"Cannot {action} while a batch job submission is in progress"
        )


class FileEntryNotFoundError(BatchError):
    """Raised when a file entry cannot be found in the registry."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"File entry not found: {entry_id}")


class InvalidStatusTransitionError(BatchError):
    """Raised when attempting an illegal file status transition."""

    def __init__(self, entry_id: str, current_state: str, target_state: str):
        self.entry_id = entry_id
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid status transition for file {entry_id}: "
            f"{current_state} -> {target_state}"
        )
