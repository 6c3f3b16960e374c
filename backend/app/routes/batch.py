"""
Batch upload endpoints.

HTTP adapter over one BatchSession held in app.state.batch_session.
Every endpoint maps to exactly one session action; no logic lives here
beyond translating errors to status codes.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.batch.errors import (
    CompositionInvalid,
    FileEntryNotFoundError,
    InvalidStatusTransitionError,
    SubmissionInProgressError,
)
from app.batch.models import FileCandidate, FileEntry, FileStatus, MergeFormat, Rejection
from app.batch.session import BatchSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/batch", tags=["batch"])


# ============================================================================
# API MODELS
# ============================================================================

class JobOptionsRequest(BaseModel):
    """Partial update of the job options. Omitted fields are unchanged."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=1, le=10)
    merge_output: Optional[bool] = None
    merge_format: Optional[MergeFormat] = None


class StatusUpdateRequest(BaseModel):
    """Server-reported status for one file."""

    model_config = ConfigDict(extra="forbid")

    status: FileStatus
    error: Optional[str] = None


def _session(request: Request) -> BatchSession:
    return request.app.state.batch_session


def _entry_dict(entry: FileEntry) -> Dict[str, Any]:
    return entry.model_dump(mode="json")


UPLOAD_CHUNK_BYTES = 1024 * 1024


async def read_candidate(upload: UploadFile, max_bytes: int) -> FileCandidate:
    """
    Turn an upload into an intake candidate without buffering oversized files.

    When the upload is known (or found while reading) to exceed max_bytes,
    reading stops and the candidate carries no payload; its size is past
    the limit, so the validator rejects it as too large.
    """
    name = upload.filename or ""

    if upload.size is not None and upload.size > max_bytes:
        return FileCandidate(name=name, size_bytes=upload.size, media_type=upload.content_type)

    chunks = []
    total = 0
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            # Size reported is a lower bound; the rest is never read
            return FileCandidate(name=name, size_bytes=total, media_type=upload.content_type)
        chunks.append(chunk)

    return FileCandidate(
        name=name,
        size_bytes=total,
        payload=b"".join(chunks),
        media_type=upload.content_type,
    )


def _rejection_dict(rejection: Rejection) -> Dict[str, Any]:
    return {
        "name": rejection.name,
        "reason": rejection.reason.value,
        "message": rejection.message,
    }


# ============================================================================
# FILES
# ============================================================================

@router.post("/files")
async def add_files(request: Request, files: List[UploadFile] = File(...)):
    """
    Add uploaded PDFs to the batch.

    Returns every appended entry and every rejection. A rejected batch is
    still a 200: rejections are part of the normal answer.
    """
    session = _session(request)

    max_bytes = session.settings.max_file_bytes
    candidates = [await read_candidate(upload, max_bytes) for upload in files]

    try:
        result = session.intake(candidates)
    except SubmissionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {
        "appended": [_entry_dict(e) for e in result.appended],
        "rejections": [_rejection_dict(r) for r in result.rejections],
        "total": session.registry.count(),
    }


@router.get("/files")
async def list_files(request: Request):
    return {"files": [_entry_dict(e) for e in _session(request).entries()]}


@router.delete("/files/{entry_id}")
async def remove_file(entry_id: str, request: Request):
    session = _session(request)
    try:
        entry = session.remove(entry_id)
    except FileEntryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SubmissionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"removed": _entry_dict(entry), "total": session.registry.count()}


@router.delete("/files")
async def clear_files(request: Request):
    session = _session(request)
    try:
        session.clear()
    except SubmissionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"total": 0}


@router.put("/files/{entry_id}/status")
async def update_file_status(entry_id: str, body: StatusUpdateRequest, request: Request):
    """Apply a status reported by the processing backend."""
    try:
        entry = _session(request).apply_status(entry_id, body.status, body.error)
    except FileEntryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _entry_dict(entry)


@router.get("/totals")
async def get_totals(request: Request):
    totals = _session(request).totals()
    return {
        "count": totals.count,
        "size_bytes": totals.size_bytes,
        "size": totals.human_size,
        "estimated_pages": totals.estimated_pages,
    }


# ============================================================================
# OPTIONS AND SUBMISSION
# ============================================================================

@router.get("/options")
async def get_options(request: Request):
    return _session(request).options.model_dump(mode="json")


@router.put("/options")
async def update_options(body: JobOptionsRequest, request: Request):
    try:
        options = _session(request).update_options(**body.model_dump(exclude_unset=True))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return options.model_dump(mode="json")


@router.post("/submit")
async def submit_job(request: Request):
    """
    Submit the current batch as one job.

    400 if the batch cannot be composed, 409 if a submission is already
    in flight, 502 if the job API failed. Registry and options are only
    reset on success.
    """
    session = _session(request)
    try:
        outcome = await session.submit()
    except CompositionInvalid as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SubmissionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not outcome.success:
        raise HTTPException(status_code=502, detail=outcome.message)

    return {
        "success": True,
        "message": outcome.message,
        "job": outcome.result,
        "request": outcome.request.to_payload(),
    }
