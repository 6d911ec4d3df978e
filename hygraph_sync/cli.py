"""Command-line interface for hygraph-sync."""

import asyncio
import json
import logging

import click

from .config import Settings, load_settings
from .core.cache import InMemoryContentCache
from .core.content_source import HygraphContentSource
from .core.models import ContentChanges
from .core.query_ast import ObjectNode
from .core.serializer import serialize


def _source(settings: Settings) -> HygraphContentSource:
    return HygraphContentSource(settings, InMemoryContentCache())


async def _load_schema(source: HygraphContentSource):
    schema = await source.get_schema()
    source.cache.schema = schema
    return schema


@click.group()
@click.version_option(package_name="hygraph-sync")
@click.option("--environment", "-e", help="Hygraph environment (default: HYGRAPH_ENVIRONMENT or master).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, environment: str | None, verbose: bool):
    """Sync Hygraph content into a local cache.

    Connection settings are read from HYGRAPH_* environment variables
    or a .env file.
    """
    overrides = {"environment": environment} if environment else {}
    settings = load_settings(**overrides)
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@main.command()
@click.pass_obj
def schema(settings: Settings):
    """Print the models of the content schema."""

    async def run():
        source = _source(settings)
        try:
            ir = await _load_schema(source)
        finally:
            await source.close()

        click.echo(f"Models: {len(ir.data_models)}")
        click.echo(f"Components: {len(ir.models) - len(ir.data_models)}")
        click.echo(f"Locales: {', '.join(locale.code for locale in ir.locales) or '-'}")
        click.echo(f"Max pagination size: {ir.max_pagination_size}")
        for model in ir.models.values():
            kind = "component" if model.is_component else "model"
            click.echo(f"  {model.name} ({kind}, {len(model.fields)} fields)")

    asyncio.run(run())


@main.command()
@click.argument("model_name")
@click.option("--depth", "-d", type=int, help="Override how often a model may be nested.")
@click.pass_obj
def query(settings: Settings, model_name: str, depth: int | None):
    """Print the entries query compiled for MODEL_NAME.

    Examples:

        hygraph-sync query Page

        hygraph-sync query Page --depth 2
    """

    async def run():
        source = _source(settings)
        try:
            ir = await _load_schema(source)
        finally:
            await source.close()

        model = ir.get_model_by_name(model_name)
        if model is None:
            raise click.ClickException(f"Unknown model: {model_name}")

        builder = source.client.query_builder(ir)
        if depth is not None:
            builder.max_depth = depth
        template = builder.entries_connection(
            model, ir.max_pagination_size, where=settings.entries_filter.get(model.name)
        )
        click.echo(serialize(ObjectNode("query").add(template)))

    asyncio.run(run())


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print documents and assets as JSON.")
@click.pass_obj
def fetch(settings: Settings, as_json: bool):
    """Fetch all documents and assets."""

    async def run():
        source = _source(settings)
        try:
            await _load_schema(source)
            documents = await source.get_documents()
            assets = await source.get_assets()
        finally:
            await source.close()

        changes = ContentChanges(documents=documents, assets=assets)
        if as_json:
            click.echo(json.dumps(changes.model_dump(mode="json"), indent=2))
        else:
            click.echo(f"Documents: {len(documents)}")
            click.echo(f"Assets: {len(assets)}")

    asyncio.run(run())


if __name__ == "__main__":
    main()
