"""Best-effort upload and removal of supporting documents"""

import asyncio
import logging
import posixpath
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple

from cresus_dossier.config import settings
from cresus_dossier.domain.models import Attachment, PendingUpload, UploadReport
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.infrastructure.observability.metrics import attachment_counter
from cresus_dossier.utils.date_utils import epoch_millis, utc_now

# (attachment index, percent) for each chunk sent
UploadProgress = Callable[[int, int], None]


def safe_filename(filename: str) -> str:
    """Keep only the last path component of a client-supplied filename"""
    name = posixpath.basename((filename or "").replace("\\", "/")).strip()
    return name or "fichier"


def object_path(stamp: int, index: int, filename: str) -> str:
    return f"{settings.storage_prefix}/{stamp}_{index}_{safe_filename(filename)}"


async def upload_attachments(
    storage: StorageClient,
    uploads: List[PendingUpload],
    on_progress: Optional[UploadProgress] = None,
    now: Optional[datetime] = None,
) -> UploadReport:
    """
    Upload attachments in parallel, tolerating individual failures.

    Files over the size limit are rejected before any transfer. A failing
    upload is logged and listed in the report; the others carry on.
    Uploaded attachments keep the order in which they were given.
    """
    report = UploadReport()
    accepted: List[Tuple[int, PendingUpload]] = []

    for index, upload in enumerate(uploads):
        if upload.size > settings.max_attachment_bytes:
            attachment_counter.labels(outcome="rejected").inc()
            logging.warning(
                f"Attachment {upload.filename} exceeds {settings.max_attachment_bytes} bytes",
                extra={"attachment": upload.filename, "size": upload.size},
            )
            report.rejected.append(upload.filename)
            continue
        accepted.append((index, upload))

    stamp = epoch_millis(now or utc_now())
    semaphore = asyncio.Semaphore(max(1, settings.upload_concurrency))

    async def upload_one(index: int, upload: PendingUpload) -> Attachment:
        path = object_path(stamp, index, upload.filename)
        progress = (lambda percent: on_progress(index, percent)) if on_progress else None
        async with semaphore:
            url = await storage.upload(path, upload.content, upload.content_type, on_progress=progress)
        return Attachment(name=upload.filename, url=url, path=path)

    results = await asyncio.gather(*(upload_one(i, u) for i, u in accepted), return_exceptions=True)

    for (index, upload), result in zip(accepted, results):
        if isinstance(result, Exception):
            attachment_counter.labels(outcome="failed").inc()
            logging.error(
                f"Attachment upload failed: {result}",
                extra={"attachment": upload.filename, "index": index},
            )
            report.failed.append(upload.filename)
        elif isinstance(result, BaseException):
            raise result
        else:
            attachment_counter.labels(outcome="uploaded").inc()
            report.uploaded.append(result)

    return report


async def remove_attachments(storage: StorageClient, attachments: Iterable[Attachment]) -> Tuple[int, int]:
    """
    Delete stored attachments one by one; a failure is logged and skipped.

    Returns:
        (deleted, failed) counts
    """
    deleted = failed = 0
    for attachment in attachments:
        if not attachment.path:
            continue
        try:
            await storage.delete(attachment.path)
            deleted += 1
        except Exception as e:
            failed += 1
            logging.error(f"Attachment deletion failed: {e}", extra={"path": attachment.path})
    return deleted, failed
