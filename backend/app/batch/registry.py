"""
In-memory file registry.

Holds the ordered, deduplicated set of accepted file entries for one
batch. Intake composes the validator, deduplicator and page estimator
and enforces the batch quota.

The registry provides:
- Batch intake with quota enforcement and per-file rejections
- Removal by ID and unconditional clear
- Totals recomputed from current entries on every call
- Server-driven status updates with transition validation
"""

import itertools
import logging
import uuid
from typing import Callable, Dict, Iterable, List, Optional

from .errors import FileEntryNotFoundError
from .models import (
    FileCandidate,
    FileEntry,
    FileStatus,
    IntakeResult,
    RegistryTotals,
    Rejection,
    RejectionReason,
)
from .pages import estimate_pages
from .settings import BatchSettings, DEFAULT_BATCH_SETTINGS
from .state import validate_status_transition
from .validation import Deduplicator, FileIntakeValidator

logger = logging.getLogger(__name__)


def uuid_ids() -> str:
    """Default entry ID source: UUIDv4."""
    return str(uuid.uuid4())


def counter_ids(prefix: str = "file") -> Callable[[], str]:
    """
    Monotonic entry ID source: file-1, file-2, ...

    Useful wherever identities must be predictable (tests, replays).
    """
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


class FileRegistry:
    """
    Ordered registry of accepted file entries.

    Entries keep arrival order across intake calls. Removal never
    reorders the remaining entries.
    """

    def __init__(
        self,
        settings: BatchSettings = DEFAULT_BATCH_SETTINGS,
        id_factory: Callable[[], str] = uuid_ids,
        validator: Optional[FileIntakeValidator] = None,
        deduplicator: Optional[Deduplicator] = None,
    ):
        """
        Initialize registry.

        Args:
            settings: Intake limits (quota, size limit, page divisor)
            id_factory: Callable minting a fresh unique entry ID per call
            validator: Optional validator override
            deduplicator: Optional deduplicator override
        """
        self.settings = settings
        self._id_factory = id_factory
        self._validator = validator or FileIntakeValidator(settings.max_file_bytes)
        self._deduplicator = deduplicator or Deduplicator()

        # Insertion-ordered: entry_id -> FileEntry
        self._entries: Dict[str, FileEntry] = {}

    def intake(self, candidates: Iterable[FileCandidate], quota: Optional[int] = None) -> IntakeResult:
        """
        Validate and append a batch of candidates.

        The quota is checked against the whole incoming batch: if the
        current count plus the number of candidates exceeds it, nothing is
        appended and a single QUOTA_EXCEEDED rejection is returned.

        Otherwise each candidate is validated, then checked for duplicates
        against the entries present at the start of this call plus those
        appended earlier in this same call.

        Args:
            candidates: Candidates in arrival order
            quota: Maximum registry size (defaults to settings.max_files)

        Returns:
            IntakeResult with every appended entry and every rejection
        """
        batch = list(candidates)
        limit = self.settings.max_files if quota is None else quota

        would_be_total = len(self._entries) + len(batch)
        if would_be_total > limit:
            logger.warning(
                f"Batch of {len(batch)} file(s) rejected: registry holds "
                f"{len(self._entries)}, quota is {limit}"
            )
            return IntakeResult(
                appended=[],
                rejections=[Rejection(name=None, reason=RejectionReason.QUOTA_EXCEEDED)],
            )

        known: List[FileEntry] = list(self._entries.values())
        appended: List[FileEntry] = []
        rejections: List[Rejection] = []

        for candidate in batch:
            reason = self._validator.validate(candidate)
            if reason is None and self._deduplicator.is_duplicate(candidate, known):
                reason = RejectionReason.DUPLICATE

            if reason is not None:
                logger.warning(f"Rejected {candidate.name} ({candidate.size_bytes} bytes): {reason.value}")
                rejections.append(Rejection(name=candidate.name, reason=reason))
                continue

            entry = FileEntry(
                id=self._mint_id(appended),
                name=candidate.name,
                payload=candidate.payload,
                size_bytes=candidate.size_bytes,
                estimated_pages=estimate_pages(
                    candidate.size_bytes, self.settings.page_estimate_divisor
                ),
                status=FileStatus.PENDING,
            )
            known.append(entry)
            appended.append(entry)

        for entry in appended:
            self._entries[entry.id] = entry

        if appended:
            logger.info(
                f"Added {len(appended)} file(s) to batch "
                f"({len(self._entries)} total, {len(rejections)} rejected)"
            )

        return IntakeResult(appended=appended, rejections=rejections)

    def _mint_id(self, pending: List[FileEntry]) -> str:
        entry_id = self._id_factory()
        if entry_id in self._entries or any(e.id == entry_id for e in pending):
            raise ValueError(f"ID factory produced an ID already in use: {entry_id}")
        return entry_id

    def get(self, entry_id: str) -> Optional[FileEntry]:
        """Retrieve an entry by ID, or None."""
        return self._entries.get(entry_id)

    def get_or_raise(self, entry_id: str) -> FileEntry:
        """
        Retrieve an entry by ID.

        Raises:
            FileEntryNotFoundError: If the entry does not exist
        """
        entry = self.get(entry_id)
        if entry is None:
            raise FileEntryNotFoundError(entry_id)
        return entry

    def entries(self) -> List[FileEntry]:
        """Current entries in arrival order (a copy)."""
        return list(self._entries.values())

    def remove(self, entry_id: str) -> FileEntry:
        """
        Remove an entry from the registry.

        Returns:
            The removed entry

        Raises:
            FileEntryNotFoundError: If the entry does not exist
        """
        if entry_id not in self._entries:
            raise FileEntryNotFoundError(entry_id)
        return self._entries.pop(entry_id)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def count(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def totals(self) -> RegistryTotals:
        """Aggregate counts, recomputed from the current entries."""
        entries = self._entries.values()
        return RegistryTotals(
            count=len(entries),
            size_bytes=sum(e.size_bytes for e in entries),
            estimated_pages=sum(e.estimated_pages for e in entries),
        )

    def set_status(self, entry_id: str, status: FileStatus, error: Optional[str] = None) -> FileEntry:
        """
        Apply a status reported by the processing backend.

        The entry is replaced in place, keeping its position.

        Raises:
            FileEntryNotFoundError: If the entry does not exist
            InvalidStatusTransitionError: If the transition is not allowed
        """
        entry = self.get_or_raise(entry_id)
        validate_status_transition(entry_id, entry.status, status)

        updated = entry.model_copy(update={
            "status": status,
            "error": error if status == FileStatus.ERROR else None,
        })
        self._entries[entry_id] = updated
        return updated
