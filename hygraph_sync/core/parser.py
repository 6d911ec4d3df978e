"""Hygraph content model parser.

Parses the ``contentModel`` returned by the management API's getSchema
query and produces an IRSchema.
"""

import logging
from typing import Any

from .ir import FieldKind, IRField, IRLocale, IRModel, IRSchema

logger = logging.getLogger(__name__)

# SimpleField types that need a fixed sub-selection
_SIMPLE_KINDS = {
    "RICHTEXT": FieldKind.RICH_TEXT,
    "COLOR": FieldKind.COLOR,
}
# SimpleField types the query builder cannot select as plain leaves
_UNSUPPORTED_SIMPLE_TYPES = {"LOCATION"}


class SchemaParser:
    """Parses a getSchema response into IR."""

    def __init__(self, result: dict[str, Any]):
        """Initialize a parser with the ``data`` of a getSchema response."""
        self.result = result
        self.ir = IRSchema()

    def parse(self) -> IRSchema:
        """Parse models, components and locales and return the complete IR."""
        project = (self.result.get("viewer") or {}).get("project") or {}
        environment = project.get("environment") or {}
        content_model = environment.get("contentModel") or {}

        self.ir.max_pagination_size = project.get("maxPaginationSize") or 100
        self.ir.asset_model_id = (content_model.get("assetModel") or {}).get("id")
        self.ir.locales = [
            IRLocale(code=locale["apiId"], is_default=bool(locale.get("isDefault")))
            for locale in content_model.get("locales") or []
        ]

        for model in content_model.get("models") or []:
            if model.get("isSystem"):
                continue
            self.ir.add_model(self._parse_model(model, is_component=False))

        for component in content_model.get("components") or []:
            self.ir.add_model(self._parse_model(component, is_component=True))

        return self.ir

    def _parse_model(self, model: dict[str, Any], is_component: bool) -> IRModel:
        fields = []
        for field in model.get("fields") or []:
            ir_field = self._parse_field(model["apiId"], field)
            if ir_field is not None:
                fields.append(ir_field)

        return IRModel(
            name=model["apiId"],
            plural_name=model.get("apiIdPlural") or f"{model['apiId']}s",
            fields=fields,
            is_component=is_component,
            description=model.get("description"),
        )

    def _parse_field(self, model_name: str, field: dict[str, Any]) -> IRField | None:
        """Classify one field; returns None for fields that are not queried."""
        # System fields are selected by the query builder itself
        if field.get("isSystem"):
            return None

        name = field["apiId"]
        typename = field.get("__typename")
        common = {
            "name": name,
            "is_list": bool(field.get("isList")),
            "description": field.get("description"),
        }

        if typename == "SimpleField":
            simple_type = field.get("type_simple")
            if simple_type in _UNSUPPORTED_SIMPLE_TYPES:
                logger.debug("skipping %s.%s, unsupported type %s", model_name, name, simple_type)
                return None
            return IRField(kind=_SIMPLE_KINDS.get(simple_type, FieldKind.SCALAR), **common)

        if typename == "EnumerableField":
            return IRField(kind=FieldKind.SCALAR, **common)

        if typename in ("RelationalField", "UniDirectionalRelationalField"):
            if field.get("type_relation") == "ASSET":
                return IRField(kind=FieldKind.IMAGE, **common)
            related = (field.get("relatedModel") or {}).get("apiId")
            if not related:
                return None
            return IRField(kind=FieldKind.REFERENCE, models=(related,), **common)

        if typename == "UnionField":
            # The member side of a union is reached through its parent field
            if field.get("isMemberType"):
                return None
            members = ((field.get("union") or {}).get("memberTypes")) or []
            models = tuple(
                member["parent"]["apiId"] for member in members if member.get("parent")
            )
            return IRField(kind=FieldKind.POLYMORPHIC_REFERENCE, models=models, **common)

        if typename == "ComponentField":
            component = (field.get("component") or {}).get("apiId")
            if not component:
                return None
            return IRField(kind=FieldKind.RELATION, models=(component,), **common)

        if typename == "ComponentUnionField":
            models = tuple(c["apiId"] for c in field.get("components") or [])
            return IRField(kind=FieldKind.POLYMORPHIC_RELATION, models=models, **common)

        logger.debug("skipping %s.%s, unsupported field %s", model_name, name, typename)
        return None
