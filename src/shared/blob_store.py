from typing import Any, Optional

from azure.core.exceptions import AzureError
from azure.storage.blob import BlobServiceClient, ContentSettings

from src.shared.config import AroundSettings
from src.shared.logging_utils import info as log_info, error as log_error
from src.specs.common.errors import AssetStoreFailure

_PUBLIC_LEVELS = ("blob", "container")


class BlobAssetStore:
    """Stores post images as blobs and hands back their public URL.

    The container must already exist; it is never created here. No retries:
    whether to try again is the caller's call.
    """

    def __init__(self, container_client: Any):
        self._container = container_client

    @classmethod
    def from_settings(cls, settings: AroundSettings) -> "BlobAssetStore":
        conn = settings.require("blob_connection_string")
        service = BlobServiceClient.from_connection_string(conn)
        return cls(service.get_container_client(settings.blob_container))

    def put(self, object_id: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Upload `data` under `object_id`, make it publicly readable, return its URL."""
        name = getattr(self._container, "container_name", "?")
        try:
            if not self._container.exists():
                raise AssetStoreFailure(
                    f"Blob container '{name}' does not exist",
                    details={"container": name},
                )
            blob = self._container.get_blob_client(object_id)
            kwargs = {}
            if content_type:
                kwargs["content_settings"] = ContentSettings(content_type=content_type)
            blob.upload_blob(data, overwrite=True, **kwargs)
            self._ensure_public_read()
            url = blob.url
        except AssetStoreFailure:
            log_error(object_id, "blob:container_missing", container=name)
            raise
        except AzureError as exc:
            log_error(object_id, "blob:upload_failed", container=name, error=str(exc))
            raise AssetStoreFailure("Failed to save image to blob storage") from exc

        log_info(object_id, "blob:uploaded", container=name, url=url, size=len(data))
        return url

    def _ensure_public_read(self) -> None:
        policy = self._container.get_container_access_policy()
        if (policy.get("public_access") or "").lower() in _PUBLIC_LEVELS:
            return
        identifiers = {
            ident.id: ident.access_policy
            for ident in (policy.get("signed_identifiers") or [])
        }
        self._container.set_container_access_policy(
            signed_identifiers=identifiers,
            public_access="blob",
        )
