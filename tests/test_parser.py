"""Tests for the content model parser."""

import pytest

from hygraph_sync.core.ir import FieldKind
from hygraph_sync.core.parser import SchemaParser


def field(api_id, typename="SimpleField", **extra):
    return {"__typename": typename, "apiId": api_id, "isList": False, "isSystem": False, **extra}


@pytest.fixture
def schema_result():
    """A trimmed getSchema response."""
    return {
        "viewer": {
            "project": {
                "maxPaginationSize": 250,
                "environment": {
                    "contentModel": {
                        "locales": [
                            {"apiId": "en", "isDefault": True},
                            {"apiId": "de", "isDefault": False},
                        ],
                        "assetModel": {"id": "asset-model"},
                        "models": [
                            {
                                "apiId": "Page",
                                "apiIdPlural": "Pages",
                                "isSystem": False,
                                "fields": [
                                    field("id", type_simple="ID", isSystem=True),
                                    field("title", type_simple="STRING"),
                                    field("body", type_simple="RICHTEXT"),
                                    field("accent", type_simple="COLOR"),
                                    field("where", type_simple="LOCATION"),
                                    field("kind", "EnumerableField", type_enum="ENUMERATION"),
                                    field("cover", "RelationalField", type_relation="ASSET",
                                          relatedModel={"apiId": "Asset"}),
                                    field("author", "RelationalField", type_relation="RELATION",
                                          relatedModel={"apiId": "Author"}),
                                    field("related", "UnionField", isList=True, isMemberType=False, union={
                                        "memberTypes": [
                                            {"parent": {"apiId": "Page"}},
                                            {"parent": {"apiId": "Author"}},
                                        ],
                                    }),
                                    field("hero", "ComponentField", component={"apiId": "Hero"}),
                                    field("sections", "ComponentUnionField", isList=True,
                                          components=[{"apiId": "Hero"}, {"apiId": "Card"}]),
                                    field("remote", "RemoteField", type_remote="JSON"),
                                ],
                            },
                            {
                                "apiId": "Author",
                                "apiIdPlural": "Authors",
                                "isSystem": False,
                                "fields": [
                                    field("name", type_simple="STRING"),
                                    field("pages", "UnionField", isMemberType=True, union={"memberTypes": []}),
                                ],
                            },
                            {"apiId": "User", "apiIdPlural": "Users", "isSystem": True, "fields": []},
                        ],
                        "components": [
                            {"apiId": "Hero", "apiIdPlural": "Heroes", "fields": [field("title")]},
                            {"apiId": "Card", "apiIdPlural": "Cards", "fields": [field("title")]},
                        ],
                    },
                },
            },
        },
    }


class TestSchemaParser:
    """Tests for SchemaParser."""

    def test_project_settings(self, schema_result):
        ir = SchemaParser(schema_result).parse()

        assert ir.max_pagination_size == 250
        assert ir.asset_model_id == "asset-model"
        assert [locale.code for locale in ir.locales] == ["en", "de"]
        assert ir.default_locale.code == "en"

    def test_system_models_are_skipped(self, schema_result):
        ir = SchemaParser(schema_result).parse()
        assert ir.get_model_by_name("User") is None

    def test_models_and_components(self, schema_result):
        ir = SchemaParser(schema_result).parse()

        assert [m.name for m in ir.data_models] == ["Page", "Author"]
        assert ir.get_model_by_name("Hero").is_component
        assert ir.get_model_by_name("Hero").plural_name == "Heroes"

    def test_field_kinds(self, schema_result):
        page = SchemaParser(schema_result).parse().get_model_by_name("Page")
        kinds = {f.name: f.kind for f in page.fields}

        assert kinds == {
            "title": FieldKind.SCALAR,
            "body": FieldKind.RICH_TEXT,
            "accent": FieldKind.COLOR,
            "kind": FieldKind.SCALAR,
            "cover": FieldKind.IMAGE,
            "author": FieldKind.REFERENCE,
            "related": FieldKind.POLYMORPHIC_REFERENCE,
            "hero": FieldKind.RELATION,
            "sections": FieldKind.POLYMORPHIC_RELATION,
        }

    def test_relation_targets(self, schema_result):
        page = SchemaParser(schema_result).parse().get_model_by_name("Page")

        assert page.get_field("author").models == ("Author",)
        assert page.get_field("related").models == ("Page", "Author")
        assert page.get_field("related").is_list
        assert page.get_field("sections").models == ("Hero", "Card")

    def test_field_info(self, schema_result):
        page = SchemaParser(schema_result).parse().get_model_by_name("Page")

        assert page.field_info["sections"].is_multi_model
        assert not page.field_info["hero"].is_multi_model
        assert "title" not in page.field_info

    def test_union_member_side_is_skipped(self, schema_result):
        author = SchemaParser(schema_result).parse().get_model_by_name("Author")
        assert [f.name for f in author.fields] == ["name"]

    def test_empty_result(self):
        ir = SchemaParser({}).parse()

        assert ir.models == {}
        assert ir.max_pagination_size == 100
