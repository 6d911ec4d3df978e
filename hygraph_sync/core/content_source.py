"""Content source keeping a host content cache in sync with Hygraph.

Loads the schema, entries and assets into the cache, applies webhook
notifications, and forwards editor writes to Hygraph.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from ..config import Settings
from .api_client import HygraphApiClient
from .cache import ContentCache
from .errors import GraphQLClientError, MutationError
from .ir import IRSchema
from .models import (
    Asset,
    ContentChanges,
    Document,
    WebhookOperation,
    WebhookPayload,
    entry_to_document,
    hygraph_to_asset,
)
from .reconcile import FetchItem, Reconciler, ReconcileOutcome, ReconcileResult

logger = logging.getLogger(__name__)

ASSET_CREATE_PENDING = "ASSET_CREATE_PENDING"


class HygraphContentSource:
    """Syncs one Hygraph project environment with a content cache.

    Examples:
        source = HygraphContentSource(load_settings(), cache)
        schema = await source.get_schema()
        documents = await source.get_documents()

        # In the webhook handler
        await source.on_webhook(request_json)
    """

    def __init__(
        self,
        settings: Settings,
        cache: ContentCache,
        *,
        client: HygraphApiClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.settings = settings
        self.cache = cache
        self.client = client or HygraphApiClient(
            project_id=settings.project_id,
            environment=settings.environment,
            content_api=settings.content_api,
            management_api=settings.management_api,
            management_token=settings.management_token,
            max_model_depth=settings.max_model_depth,
            timeout=settings.timeout,
        )
        self._sleep = sleep

    @property
    def manage_url(self) -> str:
        return self.settings.manage_url

    async def close(self):
        await self.client.close()

    def _reconciler(self, fetch_item: FetchItem, label: str) -> Reconciler:
        return Reconciler(
            fetch_item,
            max_attempts=self.settings.webhook_max_attempts,
            delay=self.settings.webhook_retry_delay,
            sleep=self._sleep,
            label=label,
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def get_schema(self) -> IRSchema:
        """Fetch the content schema; an empty schema if it cannot be read."""
        logger.debug("fetching schema")
        try:
            schema = await self.client.get_schema()
        except GraphQLClientError as e:
            logger.warning("Error fetching schema:\n%s", e)
            return IRSchema()
        logger.debug(
            "got %d models, locales: %d, maxPaginationSize: %d",
            len(schema.models), len(schema.locales), schema.max_pagination_size,
        )
        return schema

    async def get_documents(self) -> list[Document]:
        logger.debug("fetching documents")
        entries = await self.client.get_entries(self.cache.get_schema(), self.settings.entries_filter)
        logger.debug("got %d entries", len(entries))
        return [entry_to_document(entry, self.manage_url) for entry in entries]

    async def get_assets(self) -> list[Asset]:
        logger.debug("fetching assets")
        assets = await self.client.get_assets(self.cache.get_schema().max_pagination_size)
        logger.debug("got %d assets", len(assets))
        return [hygraph_to_asset(asset, self.manage_url) for asset in assets]

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    async def setup_webhook(self, webhook_url: str | None, local_dev: bool = False) -> None:
        """Make sure Hygraph calls ``webhook_url`` on content changes."""
        if local_dev and not webhook_url:
            logger.info(
                "Detected local development without webhook URL. Content changes made "
                "in Hygraph will not be synced until a public webhook URL is provided."
            )
            return
        await self.create_webhook_if_needed(webhook_url)

    async def create_webhook_if_needed(self, webhook_url: str | None) -> None:
        if not webhook_url:
            logger.warning("webhook URL is not set, content updates will not be synced!")
            return

        environment_id, webhooks = await self.client.get_webhooks()
        existing = next((w for w in webhooks if w.url == webhook_url), None)
        if existing is not None:
            if not existing.is_active:
                logger.info("The webhook %s already exists in Hygraph (%s), but it is not active. "
                            "Activating webhook...", webhook_url, existing.name)
                await self.client.activate_webhook(existing.id)
            else:
                logger.info("The webhook %s already exists in Hygraph (%s).", webhook_url, existing.name)
            return

        if environment_id is None:
            logger.warning("Could not resolve environment %s, webhook not created", self.settings.environment)
            return
        logger.info("The webhook %s does not exist in Hygraph. Creating a new webhook...", webhook_url)
        webhook = await self.client.create_webhook(webhook_url, environment_id)
        logger.info("Created webhook, id: %s", webhook.id)

    async def on_webhook(self, payload: WebhookPayload | dict[str, Any]) -> ReconcileResult | None:
        """Apply a webhook notification to the cache.

        The changed item is refetched from the content API rather than taken
        from the payload, retrying until the read reflects the change.
        Returns the reconciliation result, or None for deletes.
        """
        if not isinstance(payload, WebhookPayload):
            payload = WebhookPayload.model_validate(payload)
        data = payload.data
        operation = payload.operation
        logger.debug("got webhook request, %s:%s", data.typename, operation.value)

        if operation is WebhookOperation.DELETE:
            if data.is_asset:
                await self.cache.update_content(ContentChanges(deleted_asset_ids=[data.id]))
            else:
                await self.cache.update_content(ContentChanges(deleted_document_ids=[data.id]))
            return None

        if data.is_asset:
            reconciler = self._reconciler(self.client.get_asset_by_id, "asset")
            result = await reconciler.run(data.id, operation, self.cache.get_asset_by_id(data.id))
            if result.item is not None:
                asset = hygraph_to_asset(result.item, self.manage_url)
                await self.cache.update_content(ContentChanges(assets=[asset]))
            return result

        schema = self.cache.get_schema()

        async def fetch_entry(entry_id: str) -> dict[str, Any] | None:
            return await self.client.get_entry_by_id(schema, data.typename, entry_id)

        reconciler = self._reconciler(fetch_entry, "entry")
        result = await reconciler.run(data.id, operation, self.cache.get_document_by_id(data.id))
        if result.item is not None:
            document = entry_to_document(result.item, self.manage_url)
            await self.cache.update_content(ContentChanges(documents=[document]))
        return result

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_document(self, model_name: str, data: dict[str, Any]) -> str:
        """Create an entry and return its id. Raises MutationError."""
        entry = await self.client.create_entry(model_name, data)
        return entry["id"]

    async def update_document(self, document: Document, data: dict[str, Any]) -> None:
        await self.client.update_entry(document.model_name, document.id, data)

    async def delete_document(self, document: Document) -> None:
        await self.client.delete_entry(document.model_name, document.id)

    def _ids_by_plural_name(self, documents: list[Document]) -> dict[str, list[str]]:
        ids: dict[str, list[str]] = defaultdict(list)
        for document in documents:
            model = self.cache.get_model_by_name(document.model_name)
            if model is None:
                logger.warning("Unknown model %s for document %s", document.model_name, document.id)
                continue
            ids[model.plural_name].append(document.id)
        return dict(ids)

    async def publish_documents(self, documents: list[Document], assets: list[Asset]) -> None:
        logger.debug("publishing %d documents and %d assets", len(documents), len(assets))
        if documents:
            await self.client.publish_entries(self._ids_by_plural_name(documents))
        if assets:
            await self.client.publish_assets([asset.id for asset in assets])

    async def unpublish_documents(self, documents: list[Document], assets: list[Asset]) -> None:
        logger.debug("unpublishing %d documents and %d assets", len(documents), len(assets))
        if documents:
            await self.client.unpublish_entries(self._ids_by_plural_name(documents))
        if assets:
            await self.client.unpublish_assets([asset.id for asset in assets])

    async def upload_asset(self, url: str, file_name: str) -> Asset:
        """Import an asset from a public URL and wait until Hygraph created it."""
        asset_id = await self.client.create_asset_from_url(file_name, url)
        if not asset_id:
            raise MutationError("Error uploading asset")

        reconciler = self._reconciler(self.client.get_asset_by_id, "asset")
        result = await reconciler.poll(
            asset_id,
            lambda asset: (asset.get("upload") or {}).get("status") != ASSET_CREATE_PENDING,
        )
        if result.outcome is ReconcileOutcome.ABSENT:
            raise MutationError("Error finding uploaded asset")
        return hygraph_to_asset(result.item, self.manage_url)
