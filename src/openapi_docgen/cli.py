"""CLI entry point for openapi-docgen."""

import asyncio
import logging
from pathlib import Path

import click

from openapi_docgen.config import Settings, parse_headers
from openapi_docgen.errors import DocgenError
from openapi_docgen.generator.orchestrator import generate as generate_documents
from openapi_docgen.generator.pages import write_pages
from openapi_docgen.generator.validator import validate_tree
from openapi_docgen.repair import repair as repair_references
from openapi_docgen.source.definitions import LoadStatus


def _settings(**overrides) -> Settings:
    """Settings from the environment with non-empty CLI options applied on top."""
    try:
        settings = Settings.from_env()
        if overrides.get("source_headers") is not None:
            overrides["source_headers"] = parse_headers(overrides["source_headers"])
    except DocgenError as e:
        raise click.ClickException(str(e))
    update = {k: v for k, v in overrides.items() if v is not None and v != ()}
    return settings.model_copy(update=update)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log per-endpoint and per-file details.")
def main(verbose: bool):
    """openapi-docgen — per-operation OpenAPI documents from an Apifox export."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--source-url", default=None, help="Endpoint export URL (env: HTTP_SOURCE_URL).")
@click.option("--headers", "source_headers", default=None, help="Request headers as a JSON object (env: HTTP_SOURCE_HEADERS).")
@click.option("--definitions", "definitions_file", default=None, type=click.Path(path_type=Path), help="Apifox project export with schema definitions (env: APIFOX_PROJECT_FILE).")
@click.option("-o", "--output", "output_root", default=None, type=click.Path(path_type=Path), help="Output root, wiped before writing (env: OPENAPI_OUT_DIR).")
@click.option("--content", "content_root", default=None, type=click.Path(path_type=Path), help="Docs content root for page stubs (env: DOCS_CONTENT_DIR).")
@click.option("--pages-locale", default=None, help="Also write MDX page stubs for this locale.")
def generate(source_url, source_headers, definitions_file, output_root, content_root, pages_locale):
    """Regenerate one OpenAPI document per endpoint."""
    settings = _settings(
        source_url=source_url,
        source_headers=source_headers,
        definitions_file=definitions_file,
        output_root=output_root,
        content_root=content_root,
    )
    click.echo(f"Generating into {settings.output_root} from {settings.source_url}...")
    try:
        report = asyncio.run(generate_documents(settings))
    except (DocgenError, OSError) as e:
        raise click.ClickException(f"Failed to generate OpenAPI from http source: {e}")

    defs = report.definitions
    if defs.status is LoadStatus.LOADED:
        click.echo(f"Used {len(defs.definitions)} schema definitions from {defs.path}")
    else:
        click.echo(f"No schema definitions used ({defs.path}: {defs.reason})")
    click.echo(f"Generated {report.count} per-endpoint OpenAPI files into {settings.output_root}")

    if pages_locale:
        pages = write_pages(report, content_root=settings.content_root, locale=pages_locale)
        click.echo(f"Wrote {pages} pages into {settings.content_root / pages_locale / 'api'}")


@main.command()
@click.option("-l", "--locale", "locales", multiple=True, help="Locale to repair; repeatable (env: DOCS_LOCALES).")
@click.option("-o", "--output", "output_root", default=None, type=click.Path(path_type=Path), help="Generated documents root (env: OPENAPI_OUT_DIR).")
@click.option("--content", "content_root", default=None, type=click.Path(path_type=Path), help="Docs content root (env: DOCS_CONTENT_DIR).")
def repair(locales, output_root, content_root):
    """Point translated pages back at existing generated documents."""
    settings = _settings(locales=locales, output_root=output_root, content_root=content_root)
    results = repair_references(
        settings.locales,
        output_root=settings.output_root,
        content_root=settings.content_root,
    )
    for result in results:
        click.echo(f"[repair] {result.summary()}")


@main.command()
@click.option("-o", "--output", "output_root", default=None, type=click.Path(path_type=Path), help="Generated documents root (env: OPENAPI_OUT_DIR).")
def check(output_root):
    """Validate the generated documents."""
    settings = _settings(output_root=output_root)
    errors = validate_tree(settings.output_root)
    for name, problems in sorted(errors.items()):
        for problem in problems:
            click.echo(f"{name}: {problem}")
    if errors:
        raise click.ClickException(f"{len(errors)} file(s) with problems")
    click.echo("All documents valid.")
