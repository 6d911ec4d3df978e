"""Client for the Hygraph content and management APIs.

Read operations log failures and return empty results so a sync cycle can
degrade gracefully. Creates, updates and deletes raise MutationError,
publishing is best-effort and only logged.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .auth import Auth, BearerAuth
from .documents import CREATE_ASSET_WITH_URL, CREATE_WEBHOOK, GET_SCHEMA, GET_WEBHOOKS, UPDATE_WEBHOOK
from .errors import GraphQLClientError, MutationError
from .executor import GraphQLExecutor
from .ir import IRSchema
from .pagination import PaginatedFetcher, Stream
from .parser import SchemaParser
from .query_ast import ObjectNode
from .query_builder import DEFAULT_MAX_MODEL_DEPTH, QueryBuilder, remove_alias_field_names, to_lower_case_first
from .serializer import collapse_whitespace, serialize

logger = logging.getLogger(__name__)

WEBHOOK_TRIGGER_ACTIONS = ["CREATE", "UPDATE", "DELETE", "PUBLISH", "UNPUBLISH"]


class CreateWebhookInput(BaseModel):
    """Input for the management API's createWebhook mutation."""
    model_config = ConfigDict(populate_by_name=True)

    environment_id: str = Field(alias="environmentId")
    url: str
    name: str = "Visual Editor"
    description: str = "Keeps the visual editor content cache up to date"
    is_active: bool = Field(default=True, alias="isActive")
    include_payload: bool = Field(default=True, alias="includePayload")
    method: str = "POST"
    trigger_type: str = Field(default="CONTENT_MODEL", alias="triggerType")
    trigger_actions: list[str] = Field(default_factory=lambda: list(WEBHOOK_TRIGGER_ACTIONS), alias="triggerActions")
    models: list[str] = Field(default_factory=list)
    stages: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)


class Webhook(BaseModel):
    id: str
    name: str | None = None
    url: str
    is_active: bool = Field(default=True, alias="isActive")


class HygraphApiClient:
    """Reads and writes Hygraph content for one project environment."""

    def __init__(
        self,
        project_id: str,
        environment: str,
        content_api: str,
        management_api: str,
        management_token: str,
        *,
        max_model_depth: int = DEFAULT_MAX_MODEL_DEPTH,
        timeout: float = 30.0,
        content_executor: GraphQLExecutor | None = None,
        management_executor: GraphQLExecutor | None = None,
    ):
        """Initialize the client.

        Args:
            project_id: Hygraph project id
            environment: Environment name, e.g. "master"
            content_api: Content API endpoint URL
            management_api: Management API endpoint URL
            management_token: Permanent auth token, used for both APIs
            max_model_depth: How often one model is expanded along a query path
            timeout: Request timeout in seconds
            content_executor: Executor override for the content API
            management_executor: Executor override for the management API
        """
        self.project_id = project_id
        self.environment = environment
        self.max_model_depth = max_model_depth
        auth: Auth = BearerAuth(management_token)
        self.content = content_executor or GraphQLExecutor(content_api, auth=auth, timeout=timeout)
        self.management = management_executor or GraphQLExecutor(
            management_api, auth=auth, timeout=timeout
        )
        self.fetcher = PaginatedFetcher(self.content)

    async def close(self):
        await self.content.close()
        await self.management.close()

    async def __aenter__(self) -> "HygraphApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def query_builder(self, schema: IRSchema) -> QueryBuilder:
        return QueryBuilder(schema, max_depth=self.max_model_depth)

    # ------------------------------------------------------------------
    # Schema and webhooks (management API)
    # ------------------------------------------------------------------

    async def get_schema(self) -> IRSchema:
        """Fetch and parse the content model of the environment.

        Raises:
            TransportError, ProtocolError: The schema could not be fetched
        """
        result = await self.management.execute(GET_SCHEMA, {
            "projectId": self.project_id,
            "environmentName": self.environment,
        })
        return SchemaParser(result).parse()

    async def get_webhooks(self) -> tuple[str | None, list[Webhook]]:
        """Return the environment id and the webhooks registered for it."""
        result = await self.management.execute(GET_WEBHOOKS, {
            "projectId": self.project_id,
            "environmentName": self.environment,
        })
        project = (result.get("viewer") or {}).get("project") or {}
        environment = project.get("environment") or {}
        webhooks = [Webhook.model_validate(w) for w in environment.get("webhooks") or []]
        return environment.get("id"), webhooks

    async def create_webhook(self, url: str, environment_id: str) -> Webhook:
        data = CreateWebhookInput(environment_id=environment_id, url=url)
        result = await self.management.execute(CREATE_WEBHOOK, {"data": data})
        return Webhook.model_validate(result["createWebhook"]["createdWebhook"])

    async def activate_webhook(self, webhook_id: str) -> None:
        await self.management.execute(UPDATE_WEBHOOK, {
            "data": {"webhookId": webhook_id, "isActive": True},
        })

    # ------------------------------------------------------------------
    # Entries (content API)
    # ------------------------------------------------------------------

    def entry_streams(
        self,
        schema: IRSchema,
        page_size: int,
        entries_filter: Mapping[str, str] | None = None,
    ) -> list[Stream]:
        """One connection stream per data model."""
        builder = self.query_builder(schema)
        entries_filter = entries_filter or {}
        streams = []
        for model in schema.data_models:
            template = builder.entries_connection(model, page_size, where=entries_filter.get(model.name))
            streams.append(Stream(template.name, template))
        return streams

    async def get_entries(
        self,
        schema: IRSchema,
        entries_filter: Mapping[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch all draft entries of all data models."""
        page_size = schema.max_pagination_size
        streams = self.entry_streams(schema, page_size, entries_filter)
        if not streams:
            return []
        return await self.fetcher.fetch_all(streams, page_size)

    async def get_entry_by_id(self, schema: IRSchema, model_name: str, entry_id: str) -> dict[str, Any] | None:
        """Fetch one entry; None if the model is unknown, the entry missing, or the read failed."""
        model = schema.get_model_by_name(model_name)
        if model is None:
            return None
        root = self.query_builder(schema).entry_by_id(model, entry_id)
        result = await self._read(root, "entry by id")
        if not result:
            return None
        return remove_alias_field_names(result.get(to_lower_case_first(model.name)))

    async def create_entry(self, model_name: str, data: dict[str, Any]) -> dict[str, Any]:
        result = await self._write(QueryBuilder.create_entry(model_name, data), f"creating {model_name} entry")
        entry = result.get(f"create{model_name}")
        if not entry:
            raise MutationError(f"Error creating a {model_name} entry")
        return entry

    async def update_entry(self, model_name: str, entry_id: str, data: dict[str, Any]) -> None:
        await self._write(
            QueryBuilder.update_entry(model_name, entry_id, data),
            f"updating entry {entry_id}",
        )

    async def delete_entry(self, model_name: str, entry_id: str) -> None:
        await self._write(QueryBuilder.delete_entry(model_name, entry_id), f"deleting entry {entry_id}")

    async def publish_entry(self, model_name: str, entry_id: str) -> None:
        await self._publish(QueryBuilder.publish_entry(model_name, entry_id), f"publishing entry {entry_id}")

    async def unpublish_entry(self, model_name: str, entry_id: str) -> None:
        await self._publish(
            QueryBuilder.unpublish_entry(model_name, entry_id),
            f"unpublishing entry {entry_id}",
        )

    async def publish_entries(self, ids_by_plural_name: Mapping[str, list[str]]) -> None:
        if ids_by_plural_name:
            await self._publish(QueryBuilder.publish_many(ids_by_plural_name), "publishing entries")

    async def unpublish_entries(self, ids_by_plural_name: Mapping[str, list[str]]) -> None:
        if ids_by_plural_name:
            await self._publish(QueryBuilder.unpublish_many(ids_by_plural_name), "unpublishing entries")

    # ------------------------------------------------------------------
    # Assets (content API)
    # ------------------------------------------------------------------

    async def get_assets(self, page_size: int = 100) -> list[dict[str, Any]]:
        template = QueryBuilder.assets_connection(page_size)
        return await self.fetcher.fetch_all([Stream(template.name, template)], page_size)

    async def get_asset_by_id(self, asset_id: str) -> dict[str, Any] | None:
        result = await self._read(QueryBuilder.asset_by_id(asset_id), "asset")
        if not result:
            return None
        return result.get("asset")

    async def publish_assets(self, asset_ids: list[str]) -> None:
        if asset_ids:
            await self._publish(QueryBuilder.publish_many({"Assets": asset_ids}), "publishing assets")

    async def unpublish_assets(self, asset_ids: list[str]) -> None:
        if asset_ids:
            await self._publish(QueryBuilder.unpublish_many({"Assets": asset_ids}), "unpublishing assets")

    async def create_asset_from_url(self, file_name: str, url: str) -> str | None:
        """Ask Hygraph to import an asset from a public URL.

        Returns the new asset id, or None if Hygraph reported an upload error.
        """
        try:
            result = await self.content.execute(CREATE_ASSET_WITH_URL, {
                "fileName": file_name,
                "uploadUrl": url,
            })
        except GraphQLClientError as e:
            logger.warning("Error creating asset:\n%s", e)
            raise MutationError(f"Error creating asset: {e.message}") from e

        asset = result.get("createAsset") or {}
        upload = asset.get("upload") or {}
        if upload.get("error"):
            logger.warning("Error creating asset from URL:\n%s", upload["error"].get("message"))
            return None
        logger.debug("created asset from URL, id %s, status: %s", asset.get("id"), upload.get("status"))
        return asset.get("id")

    # ------------------------------------------------------------------
    # Error policy
    # ------------------------------------------------------------------

    async def _read(self, root: ObjectNode, what: str) -> dict[str, Any] | None:
        query = serialize(root)
        try:
            return await self.content.execute(query)
        except GraphQLClientError as e:
            logger.warning("Error fetching %s:\n%s\nQuery:\n%s", what, e, collapse_whitespace(query))
            return None

    async def _write(self, root: ObjectNode, what: str) -> dict[str, Any]:
        query = serialize(root)
        logger.debug("%s: %s", what, collapse_whitespace(query))
        try:
            return await self.content.execute(query)
        except GraphQLClientError as e:
            logger.warning("Error %s:\n%s\nQuery:\n%s", what, e, collapse_whitespace(query))
            raise MutationError(f"Error {what}: {e.message}", query=query) from e

    async def _publish(self, root: ObjectNode, what: str) -> None:
        query = serialize(root)
        try:
            await self.content.execute(query)
        except GraphQLClientError as e:
            logger.warning("Error %s:\n%s\nQuery:\n%s", what, e, collapse_whitespace(query))
