"""
Batch upload backend service — PDF intake and job submission
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.batch.coordinator import JobCreator
from app.batch.notifications import Notifier
from app.batch.remote import RemoteJobCreator
from app.batch.session import BatchSession
from app.batch.settings import BatchSettings
from app.routes import batch

logger = logging.getLogger(__name__)


def create_app(
    job_creator: Optional[JobCreator] = None,
    settings: Optional[BatchSettings] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Build the service with one batch session.

    Args:
        job_creator: Async job creator (defaults to the remote job API,
            configured from BATCH_API_URL / BATCH_API_TOKEN)
        settings: Intake limits (defaults to environment, BATCH_MAX_FILES)
        notifier: Notification sink (defaults to the log)
    """
    app = FastAPI(title="PDF Batch Intake", version="0.1.0")

    # CORS middleware for the dashboard dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    settings = settings or BatchSettings.from_env()
    app.state.batch_session = BatchSession(
        job_creator=job_creator or RemoteJobCreator.from_env(),
        settings=settings,
        notifier=notifier,
    )
    logger.info(f"Batch session ready (max_files={settings.max_files})")

    app.include_router(batch.router)

    @app.get("/")
    async def root():
        return {"service": "pdf-batch-intake", "status": "running"}

    return app


app = create_app()
