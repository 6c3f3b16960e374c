"""
Command-line surface for batch intake.

- check: validate local PDFs as one batch
- submit: validate and submit local PDFs as one job
- serve: run the HTTP service
"""

from .commands import main, load_candidates
from .errors import CLIError, InputFileError

__all__ = [
    "main",
    "load_candidates",
    "CLIError",
    "InputFileError",
]
