"""Content cache collaborator.

The sync logic reads the schema and previously cached items through the
ContentCache protocol and writes every change back in a single
``update_content`` call. Storage and invalidation belong to the host.
"""

from typing import Protocol, runtime_checkable

from .ir import IRModel, IRSchema
from .models import Asset, ContentChanges, Document


@runtime_checkable
class ContentCache(Protocol):
    """Protocol for the host's content cache."""

    def get_schema(self) -> IRSchema:
        ...

    def get_model_by_name(self, name: str) -> IRModel | None:
        ...

    def get_document_by_id(self, document_id: str) -> Document | None:
        ...

    def get_asset_by_id(self, asset_id: str) -> Asset | None:
        ...

    async def update_content(self, changes: ContentChanges) -> None:
        ...


class InMemoryContentCache:
    """Dict-backed cache, used by the CLI and in tests."""

    def __init__(self, schema: IRSchema | None = None):
        self.schema = schema or IRSchema()
        self.documents: dict[str, Document] = {}
        self.assets: dict[str, Asset] = {}
        self.updates: list[ContentChanges] = []

    def get_schema(self) -> IRSchema:
        return self.schema

    def get_model_by_name(self, name: str) -> IRModel | None:
        return self.schema.get_model_by_name(name)

    def get_document_by_id(self, document_id: str) -> Document | None:
        return self.documents.get(document_id)

    def get_asset_by_id(self, asset_id: str) -> Asset | None:
        return self.assets.get(asset_id)

    async def update_content(self, changes: ContentChanges) -> None:
        self.updates.append(changes)
        for document in changes.documents:
            self.documents[document.id] = document
        for asset in changes.assets:
            self.assets[asset.id] = asset
        for document_id in changes.deleted_document_ids:
            self.documents.pop(document_id, None)
        for asset_id in changes.deleted_asset_ids:
            self.assets.pop(asset_id, None)
