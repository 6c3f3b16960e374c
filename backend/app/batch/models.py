"""
Batch intake data models.

FileEntry and JobRequest are immutable snapshots. JobOptions is the only
model edited in place (by user input) and re-validates on assignment.

All persistent-shaped models use Pydantic. Small result carriers are
plain dataclasses, the same split used by the ingestion service.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileStatus(str, Enum):
    """
    Per-file upload status.

    Entries are created PENDING. Every later status is reported by the
    processing backend and applied through the session.
    """

    PENDING = "pending"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    ERROR = "error"


class RejectionReason(str, Enum):
    """Why a candidate was not added to the registry."""

    NOT_PDF = "not_pdf"
    TOO_LARGE = "too_large"
    DUPLICATE = "duplicate"
    QUOTA_EXCEEDED = "quota_exceeded"

    @property
    def message(self) -> str:
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES = {
    RejectionReason.NOT_PDF: "Only PDF files are allowed",
    RejectionReason.TOO_LARGE: "File size must be less than 50MB",
    RejectionReason.DUPLICATE: "File already added",
    RejectionReason.QUOTA_EXCEEDED: "Too many files for one batch",
}


class CompositionReason(str, Enum):
    """Why a job request could not be composed."""

    EMPTY_FILE_SET = "empty_file_set"
    EMPTY_NAME = "empty_name"

    @property
    def message(self) -> str:
        if self is CompositionReason.EMPTY_FILE_SET:
            return "At least one file is required"
        return "Job name is required"


class MergeFormat(str, Enum):
    """Output format for a merged job result."""

    TXT = "txt"
    MD = "md"
    DOCX = "docx"


@dataclass(frozen=True)
class FileCandidate:
    """
    A raw file offered for intake.

    The payload is whatever handle the intake source hands over (bytes,
    an open file, an upload object). It is carried along untouched.
    """

    name: str
    size_bytes: int
    payload: Any = field(default=None, repr=False, compare=False)
    media_type: Optional[str] = None

    def __post_init__(self):
        if self.size_bytes < 0:
            raise ValueError(f"File size cannot be negative: {self.size_bytes}")

    @classmethod
    def from_path(cls, path, media_type: Optional[str] = None) -> "FileCandidate":
        """Build a candidate from a local file, reading its bytes."""
        p = Path(path)
        data = p.read_bytes()
        return cls(name=p.name, size_bytes=len(data), payload=data, media_type=media_type)


class FileEntry(BaseModel):
    """
    An accepted file waiting for job submission.

    Entries are frozen; status changes produce a new entry that replaces
    the old one in the registry.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Identity
    id: str
    name: str

    # Underlying binary payload; never serialized
    payload: Any = Field(default=None, exclude=True, repr=False)

    size_bytes: int = Field(ge=0)
    estimated_pages: int = Field(ge=1)

    # State
    status: FileStatus = FileStatus.PENDING
    error: Optional[str] = None  # Set when status is ERROR


class JobOptions(BaseModel):
    """
    User-editable job options.

    Priority is range-checked on every assignment. The name is only
    checked (non-empty after trimming) when a job is composed, so that a
    half-filled form can still be held here.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str = ""
    description: Optional[str] = ""
    priority: int = Field(default=5, ge=1, le=10)
    merge_output: bool = False
    merge_format: MergeFormat = MergeFormat.TXT

    @field_validator("description")
    @classmethod
    def none_description_is_empty(cls, v: Optional[str]) -> str:
        return v or ""


class JobRequest(BaseModel):
    """
    Immutable snapshot of a job submission.

    Built by the composer from the registry entries and options at one
    moment; never mutated afterwards.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    description: Optional[str] = None
    files: Tuple[FileEntry, ...]
    priority: int = Field(ge=1, le=10)
    merge_output: bool
    merge_format: Optional[MergeFormat] = None

    @property
    def total_estimated_pages(self) -> int:
        return sum(f.estimated_pages for f in self.files)

    def to_payload(self) -> Dict[str, Any]:
        """
        Render the body expected by the remote job API.

        description is omitted when empty and mergeFormat is omitted
        unless mergeOutput is true. Absent is not the same as null there.
        """
        payload: Dict[str, Any] = {"name": self.name}
        if self.description:
            payload["description"] = self.description
        payload["files"] = [
            {
                "name": f.name,
                "size": f.size_bytes,
                "estimatedPages": f.estimated_pages,
            }
            for f in self.files
        ]
        payload["priority"] = self.priority
        payload["mergeOutput"] = self.merge_output
        if self.merge_output and self.merge_format is not None:
            payload["mergeFormat"] = self.merge_format.value
        return payload


@dataclass(frozen=True)
class Rejection:
    """One rejected candidate. name is None for a whole-batch rejection."""

    name: Optional[str]
    reason: RejectionReason

    @property
    def message(self) -> str:
        if self.name is None:
            return self.reason.message
        return f"{self.name}: {self.reason.message}"


@dataclass
class IntakeResult:
    """Result of one intake call."""

    appended: List[FileEntry]
    rejections: List[Rejection]

    @property
    def quota_exceeded(self) -> bool:
        return any(r.reason == RejectionReason.QUOTA_EXCEEDED for r in self.rejections)


_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for display, e.g. 1536 -> '1.5 KB'."""
    if size_bytes <= 0:
        return "0 Bytes"
    i = 0
    while size_bytes >= 1024 ** (i + 1) and i < len(_SIZE_UNITS) - 1:
        i += 1
    value = f"{size_bytes / (1024 ** i):.2f}".rstrip("0").rstrip(".")
    return f"{value} {_SIZE_UNITS[i]}"


@dataclass(frozen=True)
class RegistryTotals:
    """Aggregate counts over the registry's current entries."""

    count: int
    size_bytes: int
    estimated_pages: int

    @property
    def human_size(self) -> str:
        return format_file_size(self.size_bytes)


@dataclass
class SubmissionOutcome:
    """Reported outcome of a submission attempt."""

    success: bool
    request: JobRequest
    result: Any = None  # Whatever the job creator resolved with
    error: Optional[Exception] = None

    @property
    def message(self) -> str:
        if self.success:
            return "Batch job created successfully"
        return str(self.error)
