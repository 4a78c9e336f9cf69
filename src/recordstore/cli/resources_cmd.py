"""Resource metadata commands: validate and list."""

from pathlib import Path

import click

from recordstore.metadata.loader import DefinitionLoader
from recordstore.metadata.validator import validate_metadata_dir, validate_yaml_file


@click.group()
def resources():
    """Resource definition commands."""
    pass


@resources.command()
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Validate a single YAML file instead of the whole metadata directory.",
)
@click.pass_obj
def validate(config, target_path: Path | None):
    """Validate resource YAML files against the JSON Schema."""
    metadata_path = config.metadata_path

    if target_path is not None:
        issues = validate_yaml_file(target_path)
    else:
        if not metadata_path.exists():
            click.echo(f"Error: Metadata directory not found at {metadata_path}", err=True)
            raise SystemExit(1)
        issues = validate_metadata_dir(metadata_path)

    errors = [i for i in issues if i.severity == "error"]
    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(click.style(f"\n{len(errors)} schema error(s) found", fg="red", bold=True))
        raise SystemExit(1)

    # Semantic (loader) validation only runs for the full directory
    if target_path is None:
        try:
            loader = DefinitionLoader(metadata_path, default_adapter=config.default_adapter)
            loader.load_all()
        except Exception as e:
            click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
            raise SystemExit(1)

        names = loader.list_resources()
        click.echo(f"\nLoaded {len(names)} resources:")
        for name in sorted(names):
            click.echo(f"  ✓ {name}")

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))


@resources.command("list")
@click.pass_obj
def list_cmd(config):
    """List resources with their id attribute, adapter and flags."""
    loader = DefinitionLoader(config.metadata_path, default_adapter=config.default_adapter)
    loader.load_all()

    names = loader.list_resources()
    if not names:
        click.echo("No resources defined.")
        return

    for name in sorted(names):
        definition = loader.get_resource(name)
        flags = []
        if definition.eager_inject:
            flags.append("eager")
        if definition.notify:
            flags.append("notify")
        click.echo(
            f"{name}  id={definition.id_attribute}  adapter={definition.default_adapter}"
            + (f"  [{', '.join(flags)}]" if flags else "")
        )
