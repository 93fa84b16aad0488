"""MDX page stubs that embed the generated documents.

One page per operation, laid out like the documents themselves. These are
the pages translators copy into other locales and that ``repair`` keeps
pointing at the right document.
"""

import json
import logging
from pathlib import Path

import yaml

from openapi_docgen.generator.naming import tag_path
from openapi_docgen.generator.orchestrator import GeneratedDocument, GenerationReport
from openapi_docgen.repair import PAGE_SUFFIX, relative_posix

logger = logging.getLogger(__name__)


def render_page(document: GeneratedDocument, reference: str) -> str:
    front_matter = {"title": document.title}
    if document.description:
        front_matter["description"] = document.description
    front_matter["full"] = True
    front_matter["_openapi"] = {"method": document.method.upper(), "route": document.path}

    operations = json.dumps([{"path": document.path, "method": document.method}], ensure_ascii=False, separators=(",", ":"))
    return (
        "---\n"
        + yaml.safe_dump(front_matter, allow_unicode=True, sort_keys=False)
        + "---\n\n"
        + "{/* This file was generated by openapi-docgen. Do not edit manually. */}\n\n"
        + f'<APIPage document={{"{reference}"}} operations={{{operations}}} hasHead={{false}} />\n'
    )


def page_path(document: GeneratedDocument) -> Path:
    """Page location relative to ``<content_root>/<locale>/api``."""
    first_tag = document.tags[0] if document.tags else "default"
    return Path(document.group, *tag_path(first_tag), document.operation_id + PAGE_SUFFIX)


def write_pages(report: GenerationReport, *, content_root: Path, locale: str, base: Path | None = None) -> int:
    """Write a page for every document in ``report``; returns the number written."""
    base = base or Path.cwd()
    prefix = relative_posix(report.output_root, base)
    api_root = content_root / locale / "api"
    for document in report.documents:
        target = api_root / page_path(document)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_page(document, f"{prefix}/{document.relative_path}"), encoding="utf-8")
    logger.info("Wrote %d pages into %s", len(report.documents), api_root)
    return len(report.documents)
