"""ZIP export of a dossier with its attachments"""

import json
import logging
import zipfile
from io import BytesIO
from typing import Any, Dict, Mapping

from cresus_dossier.domain.exceptions import StorageError
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.services.attachments import safe_filename


async def build_archive(storage: StorageClient, document: Mapping[str, Any]) -> bytes:
    """
    Bundle ``dossier.json`` and every attachment that can still be downloaded.

    An attachment that cannot be fetched is logged and left out.
    """
    buffer = BytesIO()
    seen: Dict[str, int] = {}

    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("dossier.json", json.dumps(document, ensure_ascii=False, indent=2, default=str))

        for attachment in document.get("files") or []:
            path = attachment.get("path")
            if not path:
                continue
            try:
                content = await storage.download(path)
            except StorageError as e:
                logging.warning(f"Attachment left out of archive: {e}", extra={"path": path})
                continue

            name = safe_filename(attachment.get("name") or path)
            count = seen.get(name, 0)
            seen[name] = count + 1
            if count:
                name = f"{count}_{name}"
            archive.writestr(f"attachments/{name}", content)

    return buffer.getvalue()
