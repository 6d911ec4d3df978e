"""Tests for the GraphQL executor."""

import httpx
import pytest

from hygraph_sync.core.api_client import CreateWebhookInput
from hygraph_sync.core.auth import BearerAuth
from hygraph_sync.core.documents import GET_WEBHOOKS
from hygraph_sync.core.errors import GraphQLClientError, ProtocolError, TransportError
from hygraph_sync.core.executor import GraphQLExecutor, dump_variable, render_query
from hygraph_sync.core.query_ast import ObjectNode, leaves

from conftest import CONTENT_URL, RecordingHandler


def executor_for(handler, auth=None):
    return GraphQLExecutor(CONTENT_URL, auth=auth, transport=httpx.MockTransport(handler))


class TestRenderQuery:
    """Tests for rendering the supported query forms."""

    def test_string_is_unchanged(self):
        assert render_query("query { pages { id } }") == "query { pages { id } }"

    def test_document_node_is_printed(self):
        text = render_query(GET_WEBHOOKS)
        assert text.startswith("query getWebhooks(")

    def test_object_node_is_serialized(self):
        root = ObjectNode("query").add(ObjectNode("pages", leaves("id")))
        assert render_query(root) == "query {\n  pages {\n    id\n  }\n}"


class TestDumpVariable:
    """Tests for variable conversion."""

    def test_nested_models_are_dumped_by_alias(self):
        data = CreateWebhookInput(environment_id="env-1", url="https://example.com/hook")
        dumped = dump_variable({"inputs": [data], "count": 1})

        assert dumped["inputs"][0]["environmentId"] == "env-1"
        assert dumped["count"] == 1

    def test_plain_values_pass_through(self):
        assert dump_variable("x") == "x"
        assert dump_variable({"webhookId": "w1", "isActive": True}) == {"webhookId": "w1", "isActive": True}


class TestExecute:
    """Tests for sending documents and handling responses."""

    @pytest.mark.asyncio
    async def test_returns_data(self):
        handler = RecordingHandler({"data": {"pages": [{"id": "p1"}]}})
        async with executor_for(handler) as executor:
            data = await executor.execute("query { pages { id } }")

        assert data == {"pages": [{"id": "p1"}]}
        assert handler.requests == [{"query": "query { pages { id } }"}]

    @pytest.mark.asyncio
    async def test_sends_auth_headers(self):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, json={"data": {}})

        async with executor_for(handler, auth=BearerAuth("secret")) as executor:
            await executor.execute("query { pages { id } }")

        assert seen["authorization"] == "Bearer secret"
        assert seen["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_missing_data_is_empty(self):
        async with executor_for(RecordingHandler({"data": None})) as executor:
            assert await executor.execute("query { pages { id } }") == {}

    @pytest.mark.asyncio
    async def test_graphql_errors_raise_protocol_error(self):
        errors = [{"message": "Field 'nope' is not defined"}, {"message": "second"}]
        async with executor_for(RecordingHandler({"data": None, "errors": errors})) as executor:
            with pytest.raises(ProtocolError) as exc_info:
                await executor.execute("query { nope }")

        assert exc_info.value.errors == errors
        assert exc_info.value.query == "query { nope }"
        assert "Field 'nope' is not defined; second" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_error_raises_transport_error(self):
        async with executor_for(RecordingHandler(httpx.Response(500, text="boom"))) as executor:
            with pytest.raises(TransportError) as exc_info:
                await executor.execute("query { pages { id } }")

        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value, GraphQLClientError)

    @pytest.mark.asyncio
    async def test_network_error_raises_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with executor_for(handler) as executor:
            with pytest.raises(TransportError) as exc_info:
                await executor.execute("query { pages { id } }")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_invalid_json_raises_transport_error(self):
        async with executor_for(RecordingHandler(httpx.Response(200, text="<html>"))) as executor:
            with pytest.raises(TransportError):
                await executor.execute("query { pages { id } }")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [["not", "an", "object"], "text", {"data": ["pages"]}])
    async def test_non_object_response_raises_protocol_error(self, body):
        async with executor_for(RecordingHandler(body)) as executor:
            with pytest.raises(ProtocolError) as exc_info:
                await executor.execute("query { pages { id } }")

        assert exc_info.value.errors == []
        assert exc_info.value.query == "query { pages { id } }"

    @pytest.mark.asyncio
    async def test_pydantic_variables_use_aliases(self):
        handler = RecordingHandler({"data": {}})
        data = CreateWebhookInput(environment_id="env-1", url="https://example.com/hook")

        async with executor_for(handler) as executor:
            await executor.execute("mutation { ok }", {"data": data, "skipped": None})

        variables = handler.requests[0]["variables"]
        assert "skipped" not in variables
        assert variables["data"]["environmentId"] == "env-1"
        assert variables["data"]["triggerActions"] == ["CREATE", "UPDATE", "DELETE", "PUBLISH", "UNPUBLISH"]
        assert variables["data"]["isActive"] is True

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        executor = executor_for(RecordingHandler({"data": {}}))
        await executor.execute("query { pages { id } }")
        await executor.close()
        await executor.close()
