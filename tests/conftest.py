"""Shared fixtures for hygraph-sync tests."""

import json
from typing import Any, Callable

import httpx
import pytest
from graphql import parse

from hygraph_sync.config import Settings
from hygraph_sync.core.api_client import HygraphApiClient
from hygraph_sync.core.executor import GraphQLExecutor
from hygraph_sync.core.ir import FieldKind, IRField, IRModel, IRSchema

CONTENT_URL = "https://content.test/graphql"
MANAGEMENT_URL = "https://management.test/graphql"


@pytest.fixture
def schema():
    """A schema with a polymorphic field, a name clash and a component cycle.

    Page.sections may hold a Hero or a Card; both have a "title" field, a
    scalar on Hero and rich text on Card. Hero -> Button -> (Hero | Card)
    forms a cycle.
    """
    ir = IRSchema(max_pagination_size=2)
    ir.add_model(IRModel(
        name="Page",
        plural_name="Pages",
        fields=[
            IRField("title"),
            IRField("slug"),
            IRField("body", FieldKind.RICH_TEXT),
            IRField("accent", FieldKind.COLOR),
            IRField("cover", FieldKind.IMAGE),
            IRField("sections", FieldKind.POLYMORPHIC_RELATION, is_list=True, models=("Hero", "Card")),
            IRField("author", FieldKind.REFERENCE, models=("Author",)),
            IRField("related", FieldKind.POLYMORPHIC_REFERENCE, is_list=True, models=("Page", "Author")),
        ],
    ))
    ir.add_model(IRModel(
        name="Author",
        plural_name="Authors",
        fields=[IRField("name")],
    ))
    ir.add_model(IRModel(
        name="Hero",
        plural_name="Heroes",
        is_component=True,
        fields=[
            IRField("title"),
            IRField("cta", FieldKind.RELATION, models=("Button",)),
        ],
    ))
    ir.add_model(IRModel(
        name="Card",
        plural_name="Cards",
        is_component=True,
        fields=[IRField("title", FieldKind.RICH_TEXT)],
    ))
    ir.add_model(IRModel(
        name="Button",
        plural_name="Buttons",
        is_component=True,
        fields=[
            IRField("label"),
            IRField("link", FieldKind.POLYMORPHIC_RELATION, models=("Hero", "Card")),
        ],
    ))
    return ir


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        project_id="proj",
        region="EU-CENTRAL-1",
        content_api=CONTENT_URL,
        management_api=MANAGEMENT_URL,
        management_token="secret-token",
    )


class RecordingHandler:
    """httpx MockTransport handler answering with queued responses."""

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if callable(response):
            response = response(self.requests[-1])
        if isinstance(response, httpx.Response):
            return httpx.Response(response.status_code, headers=response.headers, content=response.content)
        return httpx.Response(200, json=response)

    @property
    def queries(self) -> list[str]:
        return [r["query"] for r in self.requests]


def make_executor(handler: Callable[[httpx.Request], httpx.Response], url: str = CONTENT_URL) -> GraphQLExecutor:
    return GraphQLExecutor(url, transport=httpx.MockTransport(handler))


def make_client(content_handler=None, management_handler=None) -> HygraphApiClient:
    unused = RecordingHandler(httpx.Response(500))
    return HygraphApiClient(
        project_id="proj",
        environment="master",
        content_api=CONTENT_URL,
        management_api=MANAGEMENT_URL,
        management_token="secret-token",
        content_executor=make_executor(content_handler or unused, CONTENT_URL),
        management_executor=make_executor(management_handler or unused, MANAGEMENT_URL),
    )


class RecordingSleep:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep():
    return RecordingSleep()


def connection_page(request: dict[str, Any]) -> dict[str, Any]:
    """Answer every connection of a round with one node and no further pages."""
    operation = parse(request["query"]).definitions[0]
    data = {}
    for selection in operation.selection_set.selections:
        name = selection.name.value
        typename = name.removesuffix("sConnection").capitalize()
        data[name] = {
            "edges": [{"node": {
                "__typename": typename,
                "id": f"{typename.lower()}-1",
                "updatedAt": "2024-05-01T10:00:00.000Z",
            }}],
            "pageInfo": {"hasNextPage": False, "pageSize": 1},
        }
    return {"data": data}
