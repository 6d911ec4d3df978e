"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from hygraph_sync.cli import main
from hygraph_sync.core.content_source import HygraphContentSource
from hygraph_sync.core.models import Document, DocumentStatus


@pytest.fixture
def runner(monkeypatch, schema):
    for name in ("PROJECT_ID", "ENVIRONMENT", "CONTENT_API", "MANAGEMENT_API", "MANAGEMENT_TOKEN"):
        monkeypatch.delenv(f"HYGRAPH_{name}", raising=False)

    async def get_schema(self):
        return schema

    monkeypatch.setattr(HygraphContentSource, "get_schema", get_schema)
    return CliRunner()


class TestCli:
    """Tests for the hygraph-sync command."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        for command in ("schema", "query", "fetch"):
            assert command in result.output

    def test_schema(self, runner):
        result = runner.invoke(main, ["schema"])

        assert result.exit_code == 0, result.output
        assert "Models: 2" in result.output
        assert "Components: 3" in result.output
        assert "Hero (component" in result.output

    def test_query(self, runner):
        result = runner.invoke(main, ["query", "Page"])

        assert result.exit_code == 0, result.output
        assert "pagesConnection(stage: DRAFT, first: 2, skip: 0) {" in result.output
        assert "... on Hero {" in result.output

    def test_query_depth(self, runner):
        result = runner.invoke(main, ["query", "Page", "--depth", "1"])

        assert result.exit_code == 0, result.output
        # Button.link can only reach Card once Hero is used up
        assert result.output.count("... on Hero {") == 1

    def test_query_unknown_model(self, runner):
        result = runner.invoke(main, ["query", "Nope"])

        assert result.exit_code == 1
        assert "Unknown model: Nope" in result.output

    def test_fetch_json(self, runner, monkeypatch):
        async def get_documents(self):
            return [Document(id="p1", model_name="Page", status=DocumentStatus.ADDED)]

        async def get_assets(self):
            return []

        monkeypatch.setattr(HygraphContentSource, "get_documents", get_documents)
        monkeypatch.setattr(HygraphContentSource, "get_assets", get_assets)

        result = runner.invoke(main, ["fetch", "--json"])

        assert result.exit_code == 0, result.output
        output = json.loads(result.output)
        assert output["documents"][0]["id"] == "p1"
        assert output["assets"] == []
