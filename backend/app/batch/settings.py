"""
BatchSettings — limits applied during batch intake.

max_files is tunable per session (default 100). The per-file byte limit
and the bytes-per-page divisor are fixed service constants; they live
here so every component reads them from one place.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


MAX_FILE_BYTES = 50 * 1024 * 1024  # 52,428,800
PAGE_ESTIMATE_DIVISOR = 50 * 1024  # 51,200 bytes per estimated page
DEFAULT_MAX_FILES = 100

ENV_MAX_FILES = "BATCH_MAX_FILES"


class BatchSettings(BaseModel):
    """Intake limits for one batch session."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_files: int = Field(default=DEFAULT_MAX_FILES, ge=1)
    max_file_bytes: int = MAX_FILE_BYTES
    page_estimate_divisor: int = PAGE_ESTIMATE_DIVISOR

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BatchSettings":
        """
        Build settings from environment overrides.

        Only max_files can be overridden (BATCH_MAX_FILES).

        Raises:
            ValueError: If the override is not a positive integer
        """
        env = os.environ if environ is None else environ
        raw = env.get(ENV_MAX_FILES)
        if raw is None or raw.strip() == "":
            return cls()
        try:
            max_files = int(raw)
        except ValueError:
            raise ValueError(f"{ENV_MAX_FILES} must be an integer, got {raw!r}")
        return cls(max_files=max_files)


DEFAULT_BATCH_SETTINGS = BatchSettings()
