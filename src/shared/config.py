import os
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from src.specs.common.errors import ConfigurationError


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [w.strip() for w in raw.split(",") if w.strip()]


class AroundSettings(BaseModel):
    """Backend endpoints and feature toggles, passed explicitly to every component."""

    cosmos_connection_string: Optional[str] = None
    cosmos_database: str = "around"
    cosmos_posts_container: str = "post"
    cosmos_users_container: str = "user"

    blob_connection_string: Optional[str] = None
    blob_container: str = "post-images"

    table_connection_string: Optional[str] = None
    table_name: str = "post"

    mirror_mode: Literal["off", "thread", "queue"] = "off"
    mirror_queue: str = "post-mirror"
    mirror_max_workers: int = Field(default=4, ge=1)
    mirror_max_pending: int = Field(default=64, ge=1)

    default_radius: str = "200km"
    spam_words: List[str] = Field(default_factory=lambda: ["fuck", "100"])
    strict_coordinates: bool = True
    provision_on_startup: bool = True

    @classmethod
    def from_env(cls) -> "AroundSettings":
        try:
            return cls(
                cosmos_connection_string=os.getenv("COSMOS_DB_CONNECTION_STRING") or None,
                cosmos_database=os.getenv("COSMOS_DB_NAME", "around"),
                cosmos_posts_container=os.getenv("COSMOS_DB_CONTAINER_POSTS", "post"),
                cosmos_users_container=os.getenv("COSMOS_DB_CONTAINER_USERS", "user"),
                blob_connection_string=os.getenv("PUBLIC_BLOB_CONNECTION_STRING") or None,
                blob_container=os.getenv("POST_IMAGE_CONTAINER", "post-images"),
                table_connection_string=os.getenv("AZURE_STORAGE_CONNECTION_STRING") or None,
                table_name=os.getenv("POST_MIRROR_TABLE", "post"),
                mirror_mode=(os.getenv("POST_MIRROR_MODE") or "off").lower(),
                mirror_queue=os.getenv("POST_MIRROR_QUEUE", "post-mirror"),
                mirror_max_workers=int(os.getenv("POST_MIRROR_MAX_WORKERS", "4")),
                mirror_max_pending=int(os.getenv("POST_MIRROR_MAX_PENDING", "64")),
                default_radius=os.getenv("SEARCH_DEFAULT_RADIUS", "200km"),
                spam_words=_env_list("SPAM_FILTER_WORDS", ["fuck", "100"]),
                strict_coordinates=_env_bool("STRICT_COORDINATES", True),
                provision_on_startup=_env_bool("PROVISION_ON_STARTUP", True),
            )
        except ValueError as exc:
            # pydantic.ValidationError subclasses ValueError
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    def require(self, field: str) -> str:
        value = getattr(self, field)
        if not value:
            raise ConfigurationError(f"{field} is required", details={"setting": field})
        return value
