"""Query builder for Hygraph content operations.

Compiles content models into query AST trees. Model graphs may contain
cycles, so relation fields are expanded against a depth ledger that counts
how often each model was entered along the current path.
"""

from collections.abc import Mapping
from typing import Any

from .ir import FieldKind, IRField, IRModel, IRSchema
from .query_ast import (
    ConditionalGroup,
    EnumValue,
    LeafNode,
    ObjectNode,
    QueryNode,
    RawValue,
    leaves,
)

DEFAULT_MAX_MODEL_DEPTH = 5
DEFAULT_PAGE_SIZE = 100

DRAFT = EnumValue("DRAFT")
PUBLISHED = EnumValue("PUBLISHED")

# Fixed sub-selections for structured field kinds
_STRUCTURED_SELECTIONS: dict[FieldKind, tuple[str, ...]] = {
    FieldKind.RICH_TEXT: ("__typename", "markdown", "text"),
    FieldKind.COLOR: ("__typename", "hex"),
    FieldKind.IMAGE: ("__typename", "id"),
}


def alias_for_field_name(field_name: str, model_name: str) -> str:
    """Return the alias used for a field inside a polymorphic branch."""
    return f"__{model_name}_alias__{field_name}"


def remove_alias_field_names(value: Any) -> Any:
    """Strip polymorphic aliases from a fetched entry.

    Every mapping that carries ``__typename`` has keys prefixed with that
    type's alias renamed back to the plain field name.
    """
    if isinstance(value, list):
        return [remove_alias_field_names(item) for item in value]
    if not isinstance(value, dict):
        return value

    typename = value.get("__typename")
    prefix = alias_for_field_name("", typename) if isinstance(typename, str) else None
    result = {}
    for key, item in value.items():
        if prefix and key.startswith(prefix):
            key = key[len(prefix):]
        result[key] = remove_alias_field_names(item)
    return result


def to_lower_case_first(value: str) -> str:
    return value[:1].lower() + value[1:]


def connection(name: str, arguments: dict[str, Any], node_fields: dict[str, QueryNode]) -> ObjectNode:
    """Wrap a node selection in the connection shape used for pagination."""
    node = ObjectNode(name, arguments=arguments)
    node.add(ObjectNode("edges").add(ObjectNode("node", node_fields)))
    node.add(ObjectNode("pageInfo", leaves("hasNextPage", "pageSize")))
    return node


class QueryBuilder:
    """Builds query AST trees for Hygraph content operations."""

    def __init__(self, schema: IRSchema, max_depth: int = DEFAULT_MAX_MODEL_DEPTH):
        """Initialize with schema for model lookups.

        Args:
            schema: Content schema used to resolve relation targets
            max_depth: How many times a model may be expanded along one path
        """
        self.schema = schema
        self.max_depth = max_depth

    # ------------------------------------------------------------------
    # Field selection
    # ------------------------------------------------------------------

    def compile_field_selection(
        self,
        model: IRModel,
        ledger: Mapping[str, int] | None = None,
    ) -> dict[str, QueryNode]:
        """Compile the selection for all fields of a model.

        Never fails: relation targets missing from the schema, or models
        already expanded ``max_depth`` times on this path, are left out.
        """
        ledger = ledger or {}
        selection: dict[str, QueryNode] = {}

        for ir_field in model.fields:
            node = self._compile_field(model, ir_field, ledger)
            if node is not None:
                selection[ir_field.name] = node

        return selection

    def _compile_field(
        self,
        model: IRModel,
        ir_field: IRField,
        ledger: Mapping[str, int],
    ) -> QueryNode | None:
        kind = ir_field.kind

        if kind is FieldKind.SCALAR:
            return LeafNode(ir_field.name)

        if kind in _STRUCTURED_SELECTIONS:
            return ObjectNode(ir_field.name, leaves(*_STRUCTURED_SELECTIONS[kind]))

        info = model.field_info.get(ir_field.name)
        is_multi_model = info.is_multi_model if info else kind.is_polymorphic
        candidates = info.models if info else ir_field.models

        if kind in (FieldKind.RELATION, FieldKind.POLYMORPHIC_RELATION):
            if is_multi_model:
                return self._polymorphic_relation(ir_field.name, candidates, ledger)
            if len(candidates) == 1:
                return self._single_relation(ir_field.name, candidates[0], ledger)
            return None

        if kind in (FieldKind.REFERENCE, FieldKind.POLYMORPHIC_REFERENCE):
            if is_multi_model:
                return self._polymorphic_reference(ir_field.name, candidates)
            if len(candidates) == 1:
                return ObjectNode(ir_field.name, leaves("__typename", "id"))
            return None

        raise ValueError(f"Unhandled field kind: {kind}")

    def _can_expand(self, model_name: str, ledger: Mapping[str, int]) -> bool:
        return ledger.get(model_name, 0) < self.max_depth

    @staticmethod
    def _enter(model_name: str, ledger: Mapping[str, int]) -> dict[str, int]:
        # New mapping per branch, siblings keep their own counts
        return {**ledger, model_name: ledger.get(model_name, 0) + 1}

    def _single_relation(
        self,
        field_name: str,
        model_name: str,
        ledger: Mapping[str, int],
    ) -> ObjectNode | None:
        if not self._can_expand(model_name, ledger):
            return None
        related = self.schema.get_model_by_name(model_name)
        if related is None:
            return None

        node = ObjectNode(field_name, leaves("__typename", "id"))
        node.children.update(
            self.compile_field_selection(related, self._enter(model_name, ledger))
        )
        return node

    def _polymorphic_relation(
        self,
        field_name: str,
        model_names: tuple[str, ...],
        ledger: Mapping[str, int],
    ) -> ObjectNode:
        group = ConditionalGroup()
        for model_name in model_names:
            if not self._can_expand(model_name, ledger):
                continue
            related = self.schema.get_model_by_name(model_name)
            if related is None:
                continue

            # Fragment fields are merged into one response object, alias them
            # so same-named fields of different models cannot collide.
            selection = {"id": LeafNode("id")}
            selection.update(
                self.compile_field_selection(related, self._enter(model_name, ledger))
            )
            group.branches[model_name] = ObjectNode(
                model_name, self._alias_selection(selection, model_name)
            )

        return ObjectNode(field_name).add(LeafNode("__typename")).add(group)

    def _polymorphic_reference(self, field_name: str, model_names: tuple[str, ...]) -> ObjectNode:
        group = ConditionalGroup()
        for model_name in model_names:
            if self.schema.get_model_by_name(model_name) is None:
                continue
            group.branches[model_name] = ObjectNode(
                model_name, self._alias_selection({"id": LeafNode("id")}, model_name)
            )
        return ObjectNode(field_name).add(LeafNode("__typename")).add(group)

    @staticmethod
    def _alias_selection(selection: dict[str, QueryNode], model_name: str) -> dict[str, QueryNode]:
        aliased: dict[str, QueryNode] = {}
        for key, node in selection.items():
            if isinstance(node, (LeafNode, ObjectNode)):
                node.alias = alias_for_field_name(node.name, model_name)
            aliased[key] = node
        return aliased

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def document_fields(self, model: IRModel) -> dict[str, QueryNode]:
        """System fields every entry carries, followed by the model's fields."""
        selection: dict[str, QueryNode] = {
            "__typename": LeafNode("__typename"),
            "id": LeafNode("id"),
            "createdAt": LeafNode("createdAt"),
            "createdBy": ObjectNode("createdBy", leaves("id")),
            "updatedAt": LeafNode("updatedAt"),
            "updatedBy": ObjectNode("updatedBy", leaves("id")),
            "publishedAt": LeafNode("publishedAt"),
            "publishedBy": ObjectNode("publishedBy", leaves("id")),
            "stage": LeafNode("stage"),
            "documentInStages": ObjectNode(
                "documentInStages",
                leaves("stage", "updatedAt"),
                arguments={"stages": PUBLISHED},
            ),
        }
        # The root model counts as its own first visit
        selection.update(self.compile_field_selection(model, {model.name: 1}))
        return selection

    def entries_connection(
        self,
        model: IRModel,
        page_size: int = DEFAULT_PAGE_SIZE,
        where: str | None = None,
    ) -> ObjectNode:
        """Build the paginated connection field for one data model.

        ``where`` is a raw GraphQL filter literal, e.g. ``{ slug: "home" }``.
        """
        arguments: dict[str, Any] = {"stage": DRAFT, "first": page_size, "skip": 0}
        if where:
            arguments["where"] = RawValue(where)

        return connection(
            f"{to_lower_case_first(model.plural_name)}Connection",
            arguments,
            self.document_fields(model),
        )

    def entry_by_id(self, model: IRModel, entry_id: str) -> ObjectNode:
        """Build the query root for fetching a single entry in the draft stage."""
        field = ObjectNode(
            to_lower_case_first(model.name),
            self.document_fields(model),
            arguments={"stage": DRAFT, "where": {"id": entry_id}},
        )
        return ObjectNode("query").add(field)

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    @staticmethod
    def asset_fields() -> dict[str, QueryNode]:
        selection: dict[str, QueryNode] = leaves(
            "__typename", "id", "createdAt", "updatedAt", "stage",
        )
        selection["documentInStages"] = ObjectNode(
            "documentInStages",
            leaves("stage", "updatedAt"),
            arguments={"stages": PUBLISHED},
        )
        selection.update(leaves(
            "url", "fileName", "handle", "mimeType", "size", "width", "height",
        ))
        selection["upload"] = ObjectNode("upload", leaves("status"))
        return selection

    @staticmethod
    def assets_connection(page_size: int = DEFAULT_PAGE_SIZE) -> ObjectNode:
        return connection(
            "assetsConnection",
            {"stage": DRAFT, "first": page_size, "skip": 0},
            QueryBuilder.asset_fields(),
        )

    @staticmethod
    def asset_by_id(asset_id: str) -> ObjectNode:
        field = ObjectNode(
            "asset",
            QueryBuilder.asset_fields(),
            arguments={"stage": DRAFT, "where": {"id": asset_id}},
        )
        return ObjectNode("query").add(field)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @staticmethod
    def _mutation(field_name: str, arguments: dict[str, Any], *selection: str) -> ObjectNode:
        field = ObjectNode(field_name, leaves(*selection), arguments=arguments)
        return ObjectNode("mutation").add(field)

    @staticmethod
    def create_entry(model_name: str, data: dict[str, Any]) -> ObjectNode:
        return QueryBuilder._mutation(f"create{model_name}", {"data": data}, "id")

    @staticmethod
    def update_entry(model_name: str, entry_id: str, data: dict[str, Any]) -> ObjectNode:
        return QueryBuilder._mutation(f"update{model_name}", {"where": {"id": entry_id}, "data": data}, "id")

    @staticmethod
    def delete_entry(model_name: str, entry_id: str) -> ObjectNode:
        return QueryBuilder._mutation(f"delete{model_name}", {"where": {"id": entry_id}}, "id")

    @staticmethod
    def publish_entry(model_name: str, entry_id: str) -> ObjectNode:
        return QueryBuilder._mutation(
            f"publish{model_name}", {"where": {"id": entry_id}, "to": PUBLISHED}, "id"
        )

    @staticmethod
    def unpublish_entry(model_name: str, entry_id: str) -> ObjectNode:
        return QueryBuilder._mutation(
            f"unpublish{model_name}", {"where": {"id": entry_id}, "from": PUBLISHED}, "id"
        )

    @staticmethod
    def publish_many(ids_by_plural_name: Mapping[str, list[str]]) -> ObjectNode:
        """Publish entries of several models in one mutation document.

        Keys are plural model names (``Pages``, ``Assets``).
        """
        return QueryBuilder._batch("publishMany", "to", ids_by_plural_name)

    @staticmethod
    def unpublish_many(ids_by_plural_name: Mapping[str, list[str]]) -> ObjectNode:
        return QueryBuilder._batch("unpublishMany", "from", ids_by_plural_name)

    @staticmethod
    def _batch(prefix: str, stage_arg: str, ids_by_plural_name: Mapping[str, list[str]]) -> ObjectNode:
        root = ObjectNode("mutation")
        for plural_name, ids in ids_by_plural_name.items():
            root.add(ObjectNode(
                f"{prefix}{plural_name}",
                leaves("count"),
                arguments={"where": {"id_in": list(ids)}, stage_arg: PUBLISHED},
            ))
        return root

