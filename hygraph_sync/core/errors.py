"""Exceptions raised by the GraphQL transport and the API client."""

from typing import Any


class GraphQLClientError(Exception):
    """Base class for errors talking to a GraphQL endpoint."""

    def __init__(self, message: str, query: str | None = None):
        self.message = message
        self.query = query
        super().__init__(message)


class TransportError(GraphQLClientError):
    """The request failed at the HTTP level."""

    def __init__(self, message: str, query: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, query)


class ProtocolError(GraphQLClientError):
    """The endpoint answered but rejected the query."""

    def __init__(self, message: str, errors: list[dict[str, Any]], query: str | None = None):
        self.errors = errors
        super().__init__(message, query)


class MutationError(GraphQLClientError):
    """A create, update or delete was rejected by the platform."""
