"""CLI entry point for rapid-api."""

import importlib
import logging
from pathlib import Path

import click

from rapid_api.errors import RapidError
from rapid_api.generator.raml import schema_to_raml
from rapid_api.log import configure_logger
from rapid_api.schema.base import Schema
from rapid_api.schema.builder import SchemaBuilder
from rapid_api.schema.public import schema_to_public

DEFAULT_BASE_URL = "http://localhost:8080"


def _load_schema(target: str) -> Schema:
    """Import ``module:attribute`` and return the Schema it names."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter(f"expected module:attribute, got {target!r}", param_hint="TARGET")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name}: {e}", param_hint="TARGET") from e
    obj = getattr(module, attribute, None)
    if isinstance(obj, SchemaBuilder):
        try:
            obj = obj.build()
        except RapidError as e:
            raise click.ClickException(str(e)) from e
    if not isinstance(obj, Schema):
        raise click.BadParameter(f"{target} is not a Schema", param_hint="TARGET")
    return obj


def _write(text: str, output: Path | None) -> None:
    if output is None:
        click.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Saved to {output}", err=True)


@click.group()
@click.option("--log-file", default=None, type=click.Path(path_type=Path), help="Write logs to this file instead of stderr.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
def main(log_file: Path | None, verbose: bool):
    """rapid-api: document an API defined with rapid-api."""
    configure_logger(log_file, logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("target")
@click.option("--url", default=DEFAULT_BASE_URL, envvar="RAPID_BASE_URL", show_default=True, help="Base URI of the documented API.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file for the RAML document.")
def raml(target: str, url: str, output: Path | None):
    """Render the RAML document for TARGET (module:attribute)."""
    schema = _load_schema(target)
    try:
        text = schema_to_raml(url, schema)
    except RapidError as e:
        raise click.ClickException(str(e)) from e
    _write(text, output)


@main.command()
@click.argument("target")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file for the JSON document.")
def public(target: str, output: Path | None):
    """Write the public JSON schema for TARGET (module:attribute)."""
    schema = _load_schema(target)
    try:
        text = schema_to_public(schema).model_dump_json(indent=2)
    except RapidError as e:
        raise click.ClickException(str(e)) from e
    _write(text + "\n", output)


@main.command()
@click.argument("target")
def routes(target: str):
    """List the routes of TARGET (module:attribute)."""
    schema = _load_schema(target)
    for route in schema.routes():
        line = f"{route.method:<7} {route.path} {route.name}"
        if route.hidden:
            line += " (hidden)"
        click.echo(line)
