"""
Submission coordination.

Hands a composed JobRequest to the external job creator and applies the
outcome:

    Idle -> Submitting -> Idle (reset)       creator resolved
                       -> Idle (unchanged)   creator raised

Nothing is mutated before the creator resolves, so a failure needs no
rollback. Failures are logged, reported to the notifier and returned as
an outcome; they are never re-raised past this boundary. Once the creator
has resolved, an error in on_success is logged and the outcome is still
a success.

Only one submission may be in flight per coordinator. A second submit
while one is pending is refused with SubmissionInProgressError.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .errors import SubmissionFailed, SubmissionInProgressError
from .models import JobRequest, SubmissionOutcome
from .notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


JobCreator = Callable[[JobRequest], Awaitable[Any]]


class SubmissionCoordinator:
    """Single-flight submitter for job requests."""

    def __init__(self, notifier: Optional[Notifier] = None):
        self._notifier = notifier or LoggingNotifier()
        self._lock = asyncio.Lock()
        self._submitting = False

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    async def submit(
        self,
        request: JobRequest,
        job_creator: JobCreator,
        on_success: Optional[Callable[[JobRequest], None]] = None,
    ) -> SubmissionOutcome:
        """
        Submit a job request.

        Args:
            request: The composed, immutable request
            job_creator: Awaitable external call; raising means failure
            on_success: Applied after the creator resolves, before the
                in-flight flag is cleared (the session resets its
                registry and options here)

        Returns:
            SubmissionOutcome describing success or failure

        Raises:
            SubmissionInProgressError: If a submission is already in flight
        """
        # No await between the check and the acquire: this is atomic on one loop
        if self._lock.locked():
            raise SubmissionInProgressError()

        async with self._lock:
            self._submitting = True
            logger.info(
                f"Submitting batch job '{request.name}' with {len(request.files)} file(s), "
                f"~{request.total_estimated_pages} page(s)"
            )
            try:
                try:
                    result = await job_creator(request)
                except Exception as e:
                    failure = SubmissionFailed(e)
                    logger.error(f"Batch job '{request.name}' submission failed: {e}")
                    self._notifier.error(str(failure))
                    return SubmissionOutcome(success=False, request=request, error=failure)

                # The job exists remotely from here on; it is reported as created
                if on_success is not None:
                    try:
                        on_success(request)
                    except Exception:
                        logger.exception(
                            f"Post-submit reset for batch job '{request.name}' failed"
                        )
            finally:
                self._submitting = False

        outcome = SubmissionOutcome(success=True, request=request, result=result)
        logger.info(f"Batch job '{request.name}' created")
        self._notifier.success(outcome.message)
        return outcome
