"""Create a record from the command line."""

import asyncio
import json

import click

from recordstore.bootstrap import initialize_store
from recordstore.errors import RecordStoreError


@click.command()
@click.argument("resource_name")
@click.option("--data", "data", required=True, help="Record attributes as a JSON object.")
@click.option("--eager/--no-eager", default=None, help="Inject before the adapter confirms.")
@click.option("--no-cache", is_flag=True, default=False, help="Do not keep the result in the store.")
@click.option("--adapter", default=None, help="Adapter name override.")
@click.pass_obj
def create(config, resource_name: str, data: str, eager, no_cache: bool, adapter):
    """Create RESOURCE_NAME from --data and print the stored record."""
    try:
        attrs = json.loads(data)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--data")

    store = initialize_store(config)
    options = {"cache_response": not no_cache, "eager_inject": eager, "adapter": adapter}

    try:
        record = asyncio.run(_create(store, resource_name, attrs, options))
    except RecordStoreError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)
    finally:
        store.adapters["sql"].close()

    click.echo(json.dumps(dict(record), indent=2, default=str))


async def _create(store, resource_name, attrs, options):
    return await store.create(resource_name, attrs, options)
