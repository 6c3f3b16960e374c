"""
Single-file intake checks.

FileIntakeValidator decides whether one candidate may enter the registry
at all; Deduplicator decides whether it collides with an entry already
there. Both are pure: they never touch the registry.
"""

from typing import Iterable, Optional

from .models import FileCandidate, FileEntry, RejectionReason
from .settings import MAX_FILE_BYTES


class FileIntakeValidator:
    """
    Type and size gate for candidate files.

    Rules are applied in order and the first failure wins:
    1. NOT_PDF if the file is not a PDF
    2. TOO_LARGE if the file is bigger than max_file_bytes
    """

    PDF_EXTENSION = ".pdf"

    # Media types a PDF may arrive with. Upload surfaces often fall back
    # to octet-stream when they cannot sniff the type.
    PDF_MEDIA_TYPES = {"application/pdf", "application/x-pdf", "application/octet-stream"}

    def __init__(self, max_file_bytes: int = MAX_FILE_BYTES):
        self.max_file_bytes = max_file_bytes

    def is_pdf(self, candidate: FileCandidate) -> bool:
        """
        Check extension (case-insensitive) and, when supplied, media type.

        The extension is authoritative: a.txt is never a PDF whatever its
        declared media type.
        """
        if not candidate.name.lower().endswith(self.PDF_EXTENSION):
            return False
        if candidate.media_type:
            media_type = candidate.media_type.split(";", 1)[0].strip().lower()
            return media_type in self.PDF_MEDIA_TYPES
        return True

    def validate(self, candidate: FileCandidate) -> Optional[RejectionReason]:
        """
        Validate a single candidate.

        Returns:
            None if the candidate is accepted, otherwise the rejection reason
        """
        if not self.is_pdf(candidate):
            return RejectionReason.NOT_PDF

        # Exactly max_file_bytes is still accepted
        if candidate.size_bytes > self.max_file_bytes:
            return RejectionReason.TOO_LARGE

        return None


class Deduplicator:
    """
    Name+size collision check.

    Two different files that share a name and size collide, and identical
    content under different names is not caught.
    """

    def is_duplicate(self, candidate: FileCandidate, existing: Iterable[FileEntry]) -> bool:
        return any(
            entry.name == candidate.name and entry.size_bytes == candidate.size_bytes
            for entry in existing
        )
