"""recordstore CLI entry point."""

import logging

import click

from recordstore.config import StoreConfig


@click.group()
@click.pass_context
def cli(ctx):
    """recordstore: hook-driven object store CLI."""
    config = StoreConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


# Register subcommands
from recordstore.cli.create_cmd import create  # noqa: E402
from recordstore.cli.resources_cmd import resources  # noqa: E402

cli.add_command(resources)
cli.add_command(create)
