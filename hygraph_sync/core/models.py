"""Host-side models exchanged with the content cache.

Entries and assets fetched from Hygraph are plain dicts; the cache stores
them as Document and Asset records. Only the bookkeeping fields the sync
logic relies on are typed, the entry payload is kept as-is in ``fields``.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

PUBLISHED_STAGE = "PUBLISHED"


class WebhookOperation(str, Enum):
    """Operation announced by a Hygraph webhook."""
    CREATE = "create"
    UPDATE = "update"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    DELETE = "delete"


class DocumentStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    PUBLISHED = "published"


class StageRecord(BaseModel):
    """One entry of ``documentInStages``."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    stage: str
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class WebhookData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    typename: str = Field(alias="__typename")
    id: str
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    document_in_stages: list[StageRecord] | None = Field(default=None, alias="documentInStages")

    @property
    def is_asset(self) -> bool:
        return self.typename == "Asset"


class WebhookPayload(BaseModel):
    """Body of a Hygraph webhook request."""
    model_config = ConfigDict(extra="allow")

    operation: WebhookOperation
    data: WebhookData


class Document(BaseModel):
    """A cached content entry."""
    id: str
    model_name: str
    status: DocumentStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    manage_url: str | None = None
    fields: dict[str, Any] = Field(default_factory=dict)


class Asset(BaseModel):
    """A cached asset."""
    id: str
    status: DocumentStatus
    url: str | None = None
    file_name: str | None = None
    mime_type: str | None = None
    size: float | None = None
    width: float | None = None
    height: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    manage_url: str | None = None


class ContentChanges(BaseModel):
    """A single write to the content cache."""
    documents: list[Document] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    deleted_document_ids: list[str] = Field(default_factory=list)
    deleted_asset_ids: list[str] = Field(default_factory=list)


def published_stage(item: dict[str, Any]) -> dict[str, Any] | None:
    """Return the PUBLISHED record of an entry's ``documentInStages``."""
    for record in item.get("documentInStages") or []:
        if record.get("stage") == PUBLISHED_STAGE:
            return record
    return None


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO 8601 timestamp as returned by Hygraph.

    Values that are not valid timestamps yield None.
    """
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        logger.debug("unparseable timestamp %r", value)
        return None


def document_status(item: dict[str, Any]) -> DocumentStatus:
    """Derive the editor status of an entry from its stages."""
    published = published_stage(item)
    if published is None:
        return DocumentStatus.ADDED
    published_at = parse_timestamp(published.get("updatedAt"))
    if published_at is not None and published_at == parse_timestamp(item.get("updatedAt")):
        return DocumentStatus.PUBLISHED
    return DocumentStatus.MODIFIED


_SYSTEM_FIELDS = frozenset({
    "__typename", "id", "createdAt", "createdBy", "updatedAt", "updatedBy",
    "publishedAt", "publishedBy", "stage", "documentInStages",
})


def entry_to_document(entry: dict[str, Any], manage_url: str | None = None) -> Document:
    """Wrap a fetched entry as a Document."""
    return Document(
        id=entry["id"],
        model_name=entry["__typename"],
        status=document_status(entry),
        created_at=parse_timestamp(entry.get("createdAt")),
        updated_at=parse_timestamp(entry.get("updatedAt")),
        manage_url=f"{manage_url}/content/{entry['__typename']}/entry/{entry['id']}" if manage_url else None,
        fields={k: v for k, v in entry.items() if k not in _SYSTEM_FIELDS},
    )


def hygraph_to_asset(asset: dict[str, Any], manage_url: str | None = None) -> Asset:
    """Wrap a fetched asset as an Asset."""
    return Asset(
        id=asset["id"],
        status=document_status(asset),
        url=asset.get("url"),
        file_name=asset.get("fileName"),
        mime_type=asset.get("mimeType"),
        size=asset.get("size"),
        width=asset.get("width"),
        height=asset.get("height"),
        created_at=parse_timestamp(asset.get("createdAt")),
        updated_at=parse_timestamp(asset.get("updatedAt")),
        manage_url=f"{manage_url}/content/Asset/entry/{asset['id']}" if manage_url else None,
    )
