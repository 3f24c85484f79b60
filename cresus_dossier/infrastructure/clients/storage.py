"""Object storage HTTP client for dossier attachments (Firebase Storage REST API)"""

import asyncio
from typing import AsyncIterator, Callable, Dict, Optional
from urllib.parse import quote

import httpx

from cresus_dossier.config import settings
from cresus_dossier.domain.exceptions import StorageError
from cresus_dossier.infrastructure.observability.metrics import storage_failure_counter, storage_latency_histogram

ProgressCallback = Callable[[int], None]


class StorageClient:
    """Client for the bucket holding beneficiaries' supporting documents"""

    def __init__(
        self,
        base_url: str | None = None,
        bucket: str | None = None,
        auth_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.storage_api_base).rstrip("/")
        self.bucket = bucket or settings.storage_bucket
        self.auth_token = auth_token if auth_token is not None else settings.storage_auth_token
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.storage_max_retries
        self.backoff_base = settings.storage_backoff_base
        self.chunk_size = settings.upload_chunk_size
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _headers(self) -> Dict[str, str]:
        if self.auth_token:
            return {"Authorization": f"Bearer {self.auth_token}"}
        return {}

    def object_url(self, path: str) -> str:
        return f"{self.base_url}/{self.bucket}/o/{quote(path, safe='')}"

    def download_url(self, path: str, token: Optional[str] = None) -> str:
        """Public URL advisors follow to open an attachment"""
        url = f"{self.object_url(path)}?alt=media"
        if token:
            url += f"&token={token}"
        return url

    async def _stream(self, content: bytes, on_progress: Optional[ProgressCallback]) -> AsyncIterator[bytes]:
        total = len(content)
        sent = 0
        while sent < total:
            chunk = content[sent:sent + self.chunk_size]
            sent += len(chunk)
            yield chunk
            if on_progress:
                on_progress(round(sent * 100 / total))

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Upload an object and return its download URL.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base... (base * 2^(attempt-1))
        - Retries on 5xx errors and network failures, never on 4xx

        Raises:
            StorageError: When the upload is refused or every attempt fails
        """
        attempt = 0
        headers = {**self._headers(), "Content-Type": content_type, "Content-Length": str(len(content))}

        async with self._client() as client:
            while True:
                try:
                    with storage_latency_histogram.labels(operation="upload").time():
                        response = await client.post(
                            f"{self.base_url}/{self.bucket}/o",
                            params={"name": path, "uploadType": "media"},
                            content=self._stream(content, on_progress),
                            headers=headers,
                        )
                        response.raise_for_status()
                    break

                except httpx.HTTPStatusError as e:
                    storage_failure_counter.labels(operation="upload").inc()
                    if e.response.status_code < 500:
                        raise StorageError(f"Upload of {path} refused: {e.response.status_code}") from e
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise StorageError(f"Upload of {path} failed: {e.response.status_code}") from e

                except httpx.RequestError as e:
                    storage_failure_counter.labels(operation="upload").inc()
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise StorageError(f"Upload of {path} failed: {e}") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

        if not content and on_progress:
            on_progress(100)

        try:
            tokens = response.json().get("downloadTokens") or ""
        except ValueError:
            tokens = ""
        return self.download_url(path, tokens.split(",")[0] or None)

    async def download(self, path: str) -> bytes:
        """
        Fetch an object's content.

        Raises:
            StorageError: On timeout, HTTP errors or a missing object
        """
        async with self._client() as client:
            try:
                with storage_latency_histogram.labels(operation="download").time():
                    response = await client.get(
                        self.object_url(path),
                        params={"alt": "media"},
                        headers=self._headers(),
                    )
                    response.raise_for_status()
                return response.content

            except httpx.TimeoutException as e:
                storage_failure_counter.labels(operation="download").inc()
                raise StorageError(f"Storage timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                storage_failure_counter.labels(operation="download").inc()
                raise StorageError(f"Download of {path} failed: {e.response.status_code}") from e
            except httpx.RequestError as e:
                storage_failure_counter.labels(operation="download").inc()
                raise StorageError(f"Download of {path} failed: {e}") from e

    async def delete(self, path: str) -> None:
        """Delete an object; an object that is already gone is not an error"""
        async with self._client() as client:
            try:
                with storage_latency_histogram.labels(operation="delete").time():
                    response = await client.delete(self.object_url(path), headers=self._headers())
                if response.status_code == 404:
                    return
                response.raise_for_status()

            except httpx.HTTPStatusError as e:
                storage_failure_counter.labels(operation="delete").inc()
                raise StorageError(f"Deletion of {path} failed: {e.response.status_code}") from e
            except httpx.RequestError as e:
                storage_failure_counter.labels(operation="delete").inc()
                raise StorageError(f"Deletion of {path} failed: {e}") from e
