"""Object store HTTP client for image uploads.

Uploads binary blobs to a Cloudinary-compatible unsigned upload endpoint
and returns the public URL of each stored blob.
"""

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from noctura_catalog.domain.exceptions import UploadFailureError
from noctura_catalog.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Object Store Configuration
# ============================================================================


@dataclass
class ObjectStoreConfig:
    """Configuration for the object store endpoint."""

    base_url: str
    cloud_name: str
    upload_preset: str
    folder: str | None = None
    timeout: float | None = None

    @property
    def upload_path(self) -> str:
        """Path of the image upload endpoint relative to ``base_url``."""
        return f"/{self.cloud_name}/image/upload"

    @classmethod
    def from_settings(cls) -> "ObjectStoreConfig":
        """Build configuration from application settings."""
        return cls(
            base_url=settings.object_store_url,
            cloud_name=settings.object_store_cloud_name,
            upload_preset=settings.object_store_upload_preset,
            folder=settings.object_store_folder,
            timeout=settings.object_store_timeout,
        )


class ObjectStore(Protocol):
    """Anything able to store a blob and hand back its public URL."""

    async def upload(self, filename: str, content: bytes, content_type: str | None = None) -> str:
        ...


# ============================================================================
# Object Store HTTP Client
# ============================================================================


class ObjectStoreClient:
    """HTTP client for the object store.

    Every call is independent, so one client can serve concurrent
    uploads for the same request.
    """

    def __init__(
        self,
        config: ObjectStoreConfig,
        request_id: str | None = None,
    ) -> None:
        """Initialize object store client.

        Args:
            config: Endpoint configuration.
            request_id: Optional request ID for correlation.
        """
        self.config = config
        self.request_id = request_id
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {}
            if self.request_id:
                headers["X-Request-ID"] = self.request_id
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ObjectStoreClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str:
        """Upload a blob and return its public URL.

        Args:
            filename: Original attachment name.
            content: Raw bytes of the attachment.
            content_type: MIME type reported by the client.

        Returns:
            Public (https) URL of the stored blob.

        Raises:
            UploadFailureError: On transport error, non-2xx status or a
                response without a URL.
        """
        data: dict[str, str] = {"upload_preset": self.config.upload_preset}
        if self.config.folder:
            data["folder"] = self.config.folder

        files = {
            "file": (filename, content, content_type or "application/octet-stream"),
        }

        try:
            client = await self._get_client()
            response = await client.post(self.config.upload_path, data=data, files=files)
        except httpx.HTTPError as e:
            logger.error(
                "Object store request failed",
                filename=filename,
                error=str(e),
            )
            raise UploadFailureError(filename, str(e)) from e

        if response.status_code >= 400:
            logger.error(
                "Object store rejected upload",
                filename=filename,
                status_code=response.status_code,
            )
            raise UploadFailureError(
                filename,
                f"object store returned {response.status_code}",
                response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UploadFailureError(filename, "invalid JSON response") from e

        url = payload.get("secure_url") or payload.get("url")
        if not url:
            raise UploadFailureError(filename, "response carried no URL", response.status_code)

        logger.info(
            "Uploaded image",
            filename=filename,
            size=len(content),
            url=url,
        )
        return url
