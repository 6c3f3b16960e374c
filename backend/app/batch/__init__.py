"""
Batch intake: file validation, registry and job submission.

This module manages the client-side half of a batch PDF job:
- Validating candidate files (type, size) and rejecting duplicates
- Estimating page counts from file size
- Holding the ordered batch under a file-count quota
- Composing an immutable job request from the batch and options
- Submitting it once, resetting only on success

Not included:
- Document parsing or OCR
- Upload retry/backoff
- Persisting a batch across sessions
"""

from .errors import (
    BatchError,
    CompositionInvalid,
    SubmissionFailed,
    SubmissionInProgressError,
    FileEntryNotFoundError,
    InvalidStatusTransitionError,
)
from .models import (
    FileStatus,
    RejectionReason,
    CompositionReason,
    MergeFormat,
    FileCandidate,
    FileEntry,
    JobOptions,
    JobRequest,
    Rejection,
    IntakeResult,
    RegistryTotals,
    SubmissionOutcome,
)
from .settings import BatchSettings
from .pages import estimate_pages
from .validation import FileIntakeValidator, Deduplicator
from .registry import FileRegistry, counter_ids, uuid_ids
from .composer import JobComposer
from .coordinator import SubmissionCoordinator
from .notifications import Notifier, LoggingNotifier, RecordingNotifier
from .session import BatchSession

__all__ = [
    # Errors
    "BatchError",
    "CompositionInvalid",
    "SubmissionFailed",
    "SubmissionInProgressError",
    "FileEntryNotFoundError",
    "InvalidStatusTransitionError",
    # Models
    "FileStatus",
    "RejectionReason",
    "CompositionReason",
    "MergeFormat",
    "FileCandidate",
    "FileEntry",
    "JobOptions",
    "JobRequest",
    "Rejection",
    "IntakeResult",
    "RegistryTotals",
    "SubmissionOutcome",
    # Settings
    "BatchSettings",
    # Components
    "estimate_pages",
    "FileIntakeValidator",
    "Deduplicator",
    "FileRegistry",
    "counter_ids",
    "uuid_ids",
    "JobComposer",
    "SubmissionCoordinator",
    # Notifications
    "Notifier",
    "LoggingNotifier",
    "RecordingNotifier",
    # Session
    "BatchSession",
]
