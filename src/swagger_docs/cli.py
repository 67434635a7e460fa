"""CLI entry point for swagger-docs."""

import json
import logging
from pathlib import Path

import click

from swagger_docs.config import LOG_LEVEL
from swagger_docs.generator.html import HtmlGenerator, format_example
from swagger_docs.parser.detect import definition_ref, schema_definitions
from swagger_docs.parser.fetch import DocumentFetchError, fetch_document, is_url
from swagger_docs.parser.swagger import index_endpoints, load_document
from swagger_docs.schema.examples import ExampleSynthesizer
from swagger_docs.schema.resolver import InvalidDocumentError, RefResolver


def _load_source(source: str) -> dict:
    """Load a document from a local file or an http(s) URL."""
    try:
        if is_url(source):
            return fetch_document(source)
        path = Path(source)
        if not path.is_file():
            raise click.BadParameter(f"'{source}' is neither a file nor an http(s) URL.", param_hint="SOURCE")
        return load_document(path)
    except (InvalidDocumentError, DocumentFetchError) as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--log-level", default=LOG_LEVEL, type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), help="Logging verbosity.")
def main(log_level: str):
    """Swagger Docs: render readable API documentation from OpenAPI/Swagger documents."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("source")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output HTML file path.")
@click.option("--seed", default=None, type=int, help="Seed for generated example values.")
def html(source: str, output: Path, seed: int | None):
    """Render SOURCE (file path or URL) to a single HTML page."""
    click.echo(f"Loading {source}...")
    document = _load_source(source)

    try:
        page = HtmlGenerator(seed=seed).generate(document)
    except InvalidDocumentError as e:
        raise click.ClickException(str(e)) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(page, encoding="utf-8")
    click.echo(f"Documentation saved to {output}")


@main.command()
@click.argument("source")
def toc(source: str):
    """Print the table of contents with ordinals and anchor ids."""
    document = _load_source(source)
    groups = index_endpoints(document)
    if not groups:
        click.echo("No endpoints found.")
        return

    for group in groups:
        click.echo(f"{group.title} ({len(group.endpoints)})")
        for ep in group.endpoints:
            click.echo(f"  {ep.ordinal}. {ep.method.upper()} {ep.path}  #{ep.anchor_id}")


@main.command()
@click.argument("source")
@click.argument("schema_name")
@click.option("--seed", default=None, type=int, help="Seed for generated example values.")
def example(source: str, schema_name: str, seed: int | None):
    """Print a generated example for the named component schema."""
    document = _load_source(source)
    if schema_name not in schema_definitions(document):
        raise click.ClickException(f"Schema '{schema_name}' not found.")

    synthesizer = ExampleSynthesizer(RefResolver(document), seed=seed)
    value = synthesizer.synthesize({"$ref": definition_ref(document, schema_name)})
    click.echo(format_example(value))


@main.command()
@click.argument("url")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Where to save the document as JSON.")
def fetch(url: str, output: Path):
    """Download a remote document and save it as JSON."""
    if not is_url(url):
        raise click.ClickException("Invalid URL format")
    document = _load_source(url)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(document, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
    click.echo(f"Saved {url} to {output}")
