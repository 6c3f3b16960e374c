"""
State transition validation for file entries.

Entries are created PENDING locally. Every other status is reported by
the processing backend:

    PENDING -> UPLOADING -> UPLOADED
    PENDING -> ERROR
    UPLOADING -> ERROR
    ERROR -> UPLOADING   (backend retried the upload)

INVARIANT: UPLOADED is terminal. A late or repeated report must never
move an uploaded file back to UPLOADING or ERROR.
"""

from typing import FrozenSet, Set, Tuple

from .models import FileStatus
from .errors import InvalidStatusTransitionError


TERMINAL_FILE_STATES: FrozenSet[FileStatus] = frozenset({
    FileStatus.UPLOADED,
})


_FILE_TRANSITIONS: Set[Tuple[FileStatus, FileStatus]] = {
    (FileStatus.PENDING, FileStatus.UPLOADING),
    (FileStatus.PENDING, FileStatus.ERROR),
    (FileStatus.UPLOADING, FileStatus.UPLOADED),
    (FileStatus.UPLOADING, FileStatus.ERROR),
    (FileStatus.ERROR, FileStatus.UPLOADING),
}


def is_file_terminal(status: FileStatus) -> bool:
    """Check if a file status is terminal (immutable)."""
    return status in TERMINAL_FILE_STATES


def can_transition_file(from_status: FileStatus, to_status: FileStatus) -> bool:
    """
    Check if a file status transition is legal.

    Args:
        from_status: Current file status
        to_status: Target file status

    Returns:
        True if the transition is allowed, False otherwise
    """
    # Allow staying in same state (repeated backend reports)
    if from_status == to_status:
        return True

    if is_file_terminal(from_status):
        return False

    return (from_status, to_status) in _FILE_TRANSITIONS


def validate_status_transition(entry_id: str, from_status: FileStatus, to_status: FileStatus) -> None:
    """
    Validate a file status transition, raising an exception if illegal.

    Raises:
        InvalidStatusTransitionError: If the transition is not allowed
    """
    if not can_transition_file(from_status, to_status):
        raise InvalidStatusTransitionError(entry_id, from_status.value, to_status.value)
