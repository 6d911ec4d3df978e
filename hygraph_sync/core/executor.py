"""Transport for Hygraph's GraphQL endpoints.

One executor talks to one endpoint (content or management API) over a
lazily opened httpx client and turns HTTP and GraphQL failures into the
GraphQLClientError hierarchy.
"""

import logging
from typing import Any

import httpx
from graphql import DocumentNode, print_ast
from pydantic import BaseModel

from .auth import Auth, NoAuth
from .errors import ProtocolError, TransportError
from .query_ast import ObjectNode
from .serializer import serialize

logger = logging.getLogger(__name__)

Query = str | DocumentNode | ObjectNode


def render_query(query: Query) -> str:
    """Turn a query in any supported form into GraphQL text."""
    if isinstance(query, ObjectNode):
        return serialize(query)
    if isinstance(query, DocumentNode):
        return print_ast(query)
    return query


def dump_variable(value: Any) -> Any:
    """Convert a variable value to JSON-ready data.

    Pydantic models are dumped by alias without unset optionals, so
    ``environment_id`` is sent as ``environmentId``.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {k: dump_variable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [dump_variable(v) for v in value]
    return value


class GraphQLExecutor:
    """Sends GraphQL documents to a single Hygraph endpoint.

    Examples:
        content = GraphQLExecutor(settings.content_api, auth=BearerAuth(token))

        async with GraphQLExecutor(settings.management_api, auth=BearerAuth(token)) as management:
            data = await management.execute(GET_SCHEMA, {"projectId": project_id})
    """

    def __init__(
        self,
        url: str,
        auth: Auth | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Create an executor; no connection is opened until the first request.

        Args:
            url: Content or management API endpoint
            auth: Header provider, NoAuth for public content APIs
            timeout: Seconds before a request is abandoned
            transport: httpx transport override, e.g. httpx.MockTransport
        """
        self.url = url
        self.timeout = timeout
        self._auth = auth or NoAuth()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GraphQLExecutor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json", **self._auth.get_headers()},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Release the underlying connection pool; safe to call twice."""
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    async def execute(
        self,
        query: Query,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a document and return the ``data`` of the response.

        Args:
            query: GraphQL text, a graphql-core document, or a query AST root
            variables: Operation variables; None values are left out

        Raises:
            TransportError: The request failed or the status was not 2xx
            ProtocolError: The response carried GraphQL ``errors`` or was not
                a GraphQL response object
        """
        text = render_query(query)
        payload: dict[str, Any] = {"query": text}
        if variables:
            payload["variables"] = {
                name: dump_variable(value) for name, value in variables.items() if value is not None
            }

        client = await self._get_client()
        logger.debug("POST %s (%d bytes)", self.url, len(text))
        try:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransportError(f"HTTP {status} from {self.url}", query=text, status_code=status) from e
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(f"Request to {self.url} failed: {e}", query=text) from e

        if not isinstance(body, dict):
            raise ProtocolError(f"Response from {self.url} is not a JSON object", [], query=text)

        errors = body.get("errors")
        if errors:
            messages = "; ".join(
                error.get("message", str(error)) if isinstance(error, dict) else str(error)
                for error in errors
            )
            raise ProtocolError(f"GraphQL errors: {messages}", errors, query=text)

        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise ProtocolError(f"Response data from {self.url} is not an object", [], query=text)
        return data
