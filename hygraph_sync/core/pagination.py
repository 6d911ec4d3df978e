"""Paginated fetching of connection fields.

Several connection streams (one per model) are paginated together: each
round sends a single query holding every stream that still has pages, so
the number of round trips is the page count of the longest stream.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from .errors import GraphQLClientError, ProtocolError
from .executor import GraphQLExecutor
from .query_ast import ObjectNode
from .query_builder import remove_alias_field_names
from .serializer import collapse_whitespace, serialize

logger = logging.getLogger(__name__)


@dataclass
class Stream:
    """A connection field to paginate.

    ``template`` is the connection node, e.g. ``pagesConnection(...)``
    selecting ``edges { node }`` and ``pageInfo { hasNextPage pageSize }``.
    Its ``first`` and ``skip`` arguments are overwritten on every round.
    ``name`` is the response key; it aliases the field when it differs
    from the template's field name.
    """
    name: str
    template: ObjectNode


@dataclass
class PaginationState:
    """Cursor state of one stream within a single ``fetch_all`` call."""
    skip: int = 0
    has_next_page: bool = True


@dataclass
class FetchStats:
    """Bookkeeping for a finished ``fetch_all`` call."""
    rounds: int = 0
    items_by_stream: dict[str, int] = field(default_factory=dict)


def read_connection(
    data: dict[str, Any],
    name: str,
    query: str | None = None,
) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    """Return the alias-stripped nodes and the ``pageInfo`` of a connection.

    Raises:
        ProtocolError: The connection is not shaped like
            ``{ edges: [{ node }], pageInfo }``
    """
    connection = data.get(name) or {}
    if not isinstance(connection, dict):
        raise ProtocolError(f"Malformed connection {name}", [], query=query)
    edges = connection.get("edges") or []
    page_info = connection.get("pageInfo") or {}
    if not isinstance(edges, list) or not isinstance(page_info, dict):
        raise ProtocolError(f"Malformed connection {name}", [], query=query)

    items = []
    for edge in edges:
        node = edge.get("node") if isinstance(edge, dict) else None
        if not isinstance(node, dict):
            raise ProtocolError(f"Malformed edge in {name}: {edge!r}", [], query=query)
        items.append(remove_alias_field_names(node))
    return items, page_info


class PaginatedFetcher:
    """Fetches every page of several connection streams."""

    def __init__(self, executor: GraphQLExecutor):
        self.executor = executor
        self.last_run = FetchStats()

    def build_round_query(
        self,
        streams: list[Stream],
        states: dict[str, PaginationState],
        page_size: int,
    ) -> ObjectNode:
        """Build one query containing every stream that still has pages."""
        root = ObjectNode("query")
        for stream in streams:
            state = states[stream.name]
            if not state.has_next_page:
                continue
            arguments = {**stream.template.arguments, "first": page_size, "skip": state.skip}
            alias = stream.name if stream.name != stream.template.name else None
            root.add(replace(stream.template, arguments=arguments, alias=alias), key=stream.name)
        return root

    async def fetch_all(self, streams: list[Stream], page_size: int) -> list[dict[str, Any]]:
        """Fetch all items of all streams.

        Returns an empty list if any round fails; the failure is logged.
        """
        states = {stream.name: PaginationState() for stream in streams}
        result: list[dict[str, Any]] = []
        self.last_run = FetchStats(items_by_stream={stream.name: 0 for stream in streams})
        query = None

        try:
            while any(state.has_next_page for state in states.values()):
                query = serialize(self.build_round_query(streams, states, page_size))
                data = await self.executor.execute(query)
                self.last_run.rounds += 1

                for stream in streams:
                    state = states[stream.name]
                    if not state.has_next_page:
                        continue
                    items, page_info = read_connection(data, stream.name, query)
                    result.extend(items)
                    self.last_run.items_by_stream[stream.name] += len(items)

                    if page_info.get("hasNextPage"):
                        state.skip += page_info.get("pageSize") or page_size
                    else:
                        state.has_next_page = False

            logger.debug(
                "fetched %d items from %d streams in %d rounds",
                len(result), len(streams), self.last_run.rounds,
            )
            return result
        except GraphQLClientError as e:
            logger.warning("Error fetching %s:\n%s\nQuery:\n%s",
                           ", ".join(s.name for s in streams), e, collapse_whitespace(query))
            return []
