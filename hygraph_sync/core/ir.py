"""Intermediate Representation (IR) for Hygraph content models.

This module defines dataclasses that describe content models and their
fields in the shape the query builder needs. Models reference each other
through relation fields, so the graph may contain cycles.
"""

from dataclasses import dataclass, field
from enum import Enum


class FieldKind(Enum):
    """Classification of a model field for query compilation."""
    SCALAR = "scalar"
    RICH_TEXT = "richText"
    COLOR = "color"
    IMAGE = "image"
    # Embedded models (components), selected recursively
    RELATION = "relation"
    POLYMORPHIC_RELATION = "polymorphicRelation"
    # Links to top-level documents, selected by id only
    REFERENCE = "reference"
    POLYMORPHIC_REFERENCE = "polymorphicReference"

    @property
    def is_relation(self) -> bool:
        return self in _RELATION_KINDS

    @property
    def is_polymorphic(self) -> bool:
        return self in (FieldKind.POLYMORPHIC_RELATION, FieldKind.POLYMORPHIC_REFERENCE)


_RELATION_KINDS = frozenset({
    FieldKind.RELATION,
    FieldKind.POLYMORPHIC_RELATION,
    FieldKind.REFERENCE,
    FieldKind.POLYMORPHIC_REFERENCE,
})


@dataclass(frozen=True)
class IRField:
    """Represents a field of a content model.

    For relation kinds, ``models`` lists the referenceable model names: one
    for single relations, several for polymorphic ones. ``is_list`` marks a
    list of the item kind.
    """
    name: str
    kind: FieldKind = FieldKind.SCALAR
    is_list: bool = False
    models: tuple[str, ...] = ()
    description: str | None = None


@dataclass(frozen=True)
class FieldInfo:
    """Resolved relation metadata for a single field."""
    is_multi_model: bool
    models: tuple[str, ...]


@dataclass
class IRModel:
    """Represents a Hygraph model or component."""
    name: str
    plural_name: str
    fields: list[IRField] = field(default_factory=list)
    is_component: bool = False
    description: str | None = None
    field_info: dict[str, FieldInfo] = field(default_factory=dict)

    def __post_init__(self):
        for ir_field in self.fields:
            if ir_field.kind.is_relation and ir_field.name not in self.field_info:
                self.field_info[ir_field.name] = FieldInfo(
                    is_multi_model=ir_field.kind.is_polymorphic,
                    models=ir_field.models,
                )

    def get_field(self, name: str) -> IRField | None:
        """Look up a field by name."""
        for ir_field in self.fields:
            if ir_field.name == name:
                return ir_field
        return None


@dataclass(frozen=True)
class IRLocale:
    """Represents a project locale."""
    code: str
    is_default: bool = False


@dataclass
class IRSchema:
    """Content schema of a Hygraph project environment."""
    models: dict[str, IRModel] = field(default_factory=dict)
    locales: list[IRLocale] = field(default_factory=list)
    asset_model_id: str | None = None
    max_pagination_size: int = 100

    def get_model_by_name(self, name: str) -> IRModel | None:
        """Look up a model or component by name."""
        return self.models.get(name)

    def add_model(self, model: IRModel) -> None:
        self.models[model.name] = model

    @property
    def data_models(self) -> list[IRModel]:
        """Return the top-level (non-component) models."""
        return [m for m in self.models.values() if not m.is_component]

    @property
    def default_locale(self) -> IRLocale | None:
        for locale in self.locales:
            if locale.is_default:
                return locale
        return None
