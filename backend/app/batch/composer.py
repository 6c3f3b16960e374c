"""
Job composition.

Turns the current registry and the user's options into an immutable
JobRequest. Composition never mutates the registry or the options.
"""

from .errors import CompositionInvalid
from .models import CompositionReason, JobOptions, JobRequest
from .registry import FileRegistry


class JobComposer:
    """Builds JobRequest snapshots."""

    def compose(self, registry: FileRegistry, options: JobOptions) -> JobRequest:
        """
        Compose a job request.

        Preconditions, checked in order:
        1. The registry holds at least one entry (EMPTY_FILE_SET)
        2. The name is non-empty after trimming (EMPTY_NAME)

        merge_format is carried only when merge_output is set.

        Raises:
            CompositionInvalid: If a precondition fails
        """
        if registry.is_empty():
            raise CompositionInvalid(CompositionReason.EMPTY_FILE_SET)

        name = options.name.strip()
        if not name:
            raise CompositionInvalid(CompositionReason.EMPTY_NAME)

        description = (options.description or "").strip() or None

        return JobRequest(
            name=name,
            description=description,
            files=tuple(registry.entries()),
            priority=options.priority,
            merge_output=options.merge_output,
            merge_format=options.merge_format if options.merge_output else None,
        )
