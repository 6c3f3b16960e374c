"""
BatchSession — state container for one batch upload flow.

Owns the file registry and the job options and exposes the discrete
actions a caller may take on them:

    intake, remove, clear          registry edits (synchronous)
    update_options, reset_options  option edits (synchronous)
    compose                        build a JobRequest (synchronous)
    submit                         hand the request to the job creator (async)
    apply_status                   server-reported file status

Registry edits are refused while a submission is in flight, so the
entries being submitted are exactly the ones cleared on success.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional

from .composer import JobComposer
from .coordinator import JobCreator, SubmissionCoordinator
from .errors import CompositionInvalid, SubmissionInProgressError
from .models import (
    FileCandidate,
    FileEntry,
    FileStatus,
    IntakeResult,
    JobOptions,
    JobRequest,
    RegistryTotals,
    RejectionReason,
    SubmissionOutcome,
)
from .notifications import LoggingNotifier, Notifier
from .registry import FileRegistry, uuid_ids
from .settings import BatchSettings, DEFAULT_BATCH_SETTINGS

logger = logging.getLogger(__name__)


FilesSelectedCallback = Callable[[List[FileEntry]], Any]


class BatchSession:
    """
    One user's in-progress batch.

    Nothing here outlives the process; a dismissed form simply drops
    its session.
    """

    def __init__(
        self,
        job_creator: JobCreator,
        settings: BatchSettings = DEFAULT_BATCH_SETTINGS,
        notifier: Optional[Notifier] = None,
        on_files_selected: Optional[FilesSelectedCallback] = None,
        id_factory: Callable[[], str] = uuid_ids,
    ):
        """
        Initialize session.

        Args:
            job_creator: Async callable that creates the job remotely
            settings: Intake limits
            notifier: User notification sink (defaults to the log)
            on_files_selected: Called with the full entry list after every
                successful intake, removal or clear; errors it raises are
                logged, not propagated
            id_factory: Entry ID source
        """
        self.settings = settings
        self.notifier = notifier or LoggingNotifier()
        self.registry = FileRegistry(settings=settings, id_factory=id_factory)
        self.composer = JobComposer()
        self.coordinator = SubmissionCoordinator(notifier=self.notifier)

        self._job_creator = job_creator
        self._on_files_selected = on_files_selected
        self._options = JobOptions()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def options(self) -> JobOptions:
        """A copy of the current options; edit through update_options()."""
        return self._options.model_copy()

    @property
    def is_submitting(self) -> bool:
        return self.coordinator.is_submitting

    def entries(self) -> List[FileEntry]:
        return self.registry.entries()

    def totals(self) -> RegistryTotals:
        return self.registry.totals()

    # ------------------------------------------------------------------
    # Registry actions
    # ------------------------------------------------------------------

    def intake(self, candidates: Iterable[FileCandidate]) -> IntakeResult:
        """
        Add candidates to the batch.

        Every rejection is reported to the notifier, not only the first.

        Raises:
            SubmissionInProgressError: If a submission is in flight
        """
        self._ensure_idle("add files")
        result = self.registry.intake(candidates, quota=self.settings.max_files)

        for rejection in result.rejections:
            if rejection.reason == RejectionReason.QUOTA_EXCEEDED:
                self.notifier.error(f"Maximum {self.settings.max_files} files allowed")
            else:
                self.notifier.error(rejection.message)

        if result.appended:
            self._files_changed()
            self.notifier.success(f"Added {len(result.appended)} file(s)")

        return result

    def remove(self, entry_id: str) -> FileEntry:
        """
        Remove one entry.

        Raises:
            FileEntryNotFoundError: If the entry does not exist
            SubmissionInProgressError: If a submission is in flight
        """
        self._ensure_idle("remove files")
        entry = self.registry.remove(entry_id)
        self._files_changed()
        return entry

    def clear(self) -> None:
        """
        Remove every entry.

        Raises:
            SubmissionInProgressError: If a submission is in flight
        """
        self._ensure_idle("clear files")
        self.registry.clear()
        self._files_changed()

    def apply_status(self, entry_id: str, status: FileStatus, error: Optional[str] = None) -> FileEntry:
        """
        Apply a status reported by the processing backend.

        Raises:
            FileEntryNotFoundError: If the entry does not exist
            InvalidStatusTransitionError: If the transition is not allowed
        """
        entry = self.registry.set_status(entry_id, status, error)
        logger.debug(f"File {entry_id} status -> {status.value}")
        return entry

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def update_options(self, **changes: Any) -> JobOptions:
        """
        Change one or more option fields.

        Changes are validated together; on error the options are left
        as they were.

        Raises:
            pydantic.ValidationError: If a value is out of range or unknown
        """
        merged = {**self._options.model_dump(), **changes}
        self._options = JobOptions.model_validate(merged)
        return self.options

    def set_options(self, options: JobOptions) -> JobOptions:
        self._options = options.model_copy()
        return self.options

    def reset_options(self) -> JobOptions:
        self._options = JobOptions()
        return self.options

    # ------------------------------------------------------------------
    # Compose and submit
    # ------------------------------------------------------------------

    def compose(self) -> JobRequest:
        """
        Build a request from the current state.

        Raises:
            CompositionInvalid: If the batch is empty or the name is blank
        """
        return self.composer.compose(self.registry, self._options)

    async def submit(self) -> SubmissionOutcome:
        """
        Compose and submit the current batch.

        On success the registry is cleared and the options reset to
        defaults. On failure both are left untouched and the failure is
        returned in the outcome.

        Raises:
            CompositionInvalid: If the batch cannot be composed (reported
                to the notifier first)
            SubmissionInProgressError: If a submission is in flight
        """
        self._ensure_idle("submit")
        try:
            request = self.compose()
        except CompositionInvalid as e:
            self.notifier.error(str(e))
            raise

        return await self.coordinator.submit(
            request, self._job_creator, on_success=self._reset_after_submit
        )

    def _reset_after_submit(self, request: JobRequest) -> None:
        self.registry.clear()
        self._options = JobOptions()
        self._files_changed()

    # ------------------------------------------------------------------

    def _ensure_idle(self, action: str) -> None:
        if self.coordinator.is_submitting:
            raise SubmissionInProgressError(action)

    def _files_changed(self) -> None:
        # Observer errors never undo or mask the registry change
        if self._on_files_selected is None:
            return
        try:
            self._on_files_selected(self.registry.entries())
        except Exception:
            logger.exception("on_files_selected callback failed")
