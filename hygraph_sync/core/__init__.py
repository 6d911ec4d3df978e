"""Core modules for syncing Hygraph content."""

from .api_client import HygraphApiClient, Webhook
from .auth import Auth, BearerAuth, NoAuth
from .cache import ContentCache, InMemoryContentCache
from .content_source import HygraphContentSource
from .errors import GraphQLClientError, MutationError, ProtocolError, TransportError
from .executor import GraphQLExecutor
from .ir import FieldInfo, FieldKind, IRField, IRLocale, IRModel, IRSchema
from .models import (
    Asset,
    ContentChanges,
    Document,
    DocumentStatus,
    WebhookOperation,
    WebhookPayload,
)
from .pagination import PaginatedFetcher, PaginationState, Stream
from .parser import SchemaParser
from .query_ast import ConditionalGroup, EnumValue, LeafNode, ObjectNode, RawValue
from .query_builder import QueryBuilder, alias_for_field_name, remove_alias_field_names
from .reconcile import Reconciler, ReconcileOutcome, ReconcileResult, freshness_predicate
from .serializer import serialize

__all__ = [
    # Auth
    "Auth",
    "BearerAuth",
    "NoAuth",
    # Errors
    "GraphQLClientError",
    "TransportError",
    "ProtocolError",
    "MutationError",
    # IR types
    "FieldInfo",
    "FieldKind",
    "IRField",
    "IRLocale",
    "IRModel",
    "IRSchema",
    # Parser
    "SchemaParser",
    # Query AST
    "ConditionalGroup",
    "EnumValue",
    "LeafNode",
    "ObjectNode",
    "RawValue",
    # Query Builder
    "QueryBuilder",
    "alias_for_field_name",
    "remove_alias_field_names",
    "serialize",
    # Executor
    "GraphQLExecutor",
    # Pagination
    "PaginatedFetcher",
    "PaginationState",
    "Stream",
    # Reconciliation
    "Reconciler",
    "ReconcileOutcome",
    "ReconcileResult",
    "freshness_predicate",
    # Host models and cache
    "Asset",
    "ContentChanges",
    "Document",
    "DocumentStatus",
    "WebhookOperation",
    "WebhookPayload",
    "ContentCache",
    "InMemoryContentCache",
    # Client
    "HygraphApiClient",
    "HygraphContentSource",
    "Webhook",
]
