"""Entity ID access and URL normalization utilities."""

import time
import uuid
from typing import Any, Mapping, Optional

TEMP_ID_PREFIX = "temp-"


def get_entity_id(entity: Any) -> str:
    """Return the identifier of an API entity.

    Responses carry the identifier as either ``id`` or ``_id``; ``id`` wins
    when both are present and ``id`` is not empty. Works on mappings and
    on objects exposing an ``id`` attribute.
    """
    if isinstance(entity, Mapping):
        value = entity.get("id")
        if value is None or value == "":
            value = entity.get("_id")
    else:
        value = getattr(entity, "id", None)
        if value is None or value == "":
            value = getattr(entity, "_id", None)
    if value is None or str(value) == "":
        raise ValueError(f"Entity has no id: {entity!r}")
    return str(value)


def generate_temp_id() -> str:
    """Generate a client-side placeholder ID for an entity not yet persisted."""
    return f"{TEMP_ID_PREFIX}{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def is_temp_id(entity_id: Optional[str]) -> bool:
    return bool(entity_id) and entity_id.startswith(TEMP_ID_PREFIX)


def normalize_file_url(url: Optional[str], base_url: str) -> Optional[str]:
    """Resolve an upload URL against the API base URL.

    Absolute ``http(s)`` URLs pass through untouched; relative paths are
    joined onto ``base_url``.
    """
    if not url:
        return None
    url = url.strip()
    if url.lower().startswith(("http://", "https://")):
        return url
    base = base_url.rstrip("/")
    if not url.startswith("/"):
        url = "/" + url
    return f"{base}{url}"
