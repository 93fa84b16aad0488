"""Drive ingestion, synthesis, placement and writing for one generation run."""

import asyncio
import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

import httpx

from openapi_docgen.config import Settings
from openapi_docgen.generator.document import (
    OperationIdRegistry,
    build_document,
    endpoint_tags,
    group_for_module,
    normalize_method,
)
from openapi_docgen.generator.naming import document_path
from openapi_docgen.source.definitions import DefinitionsLoad, load_definitions
from openapi_docgen.source.remote import fetch_endpoints

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedDocument:
    endpoint_id: int
    group: str
    tags: tuple[str, ...]
    operation_id: str
    method: str
    path: str
    title: str
    description: str | None
    relative_path: PurePosixPath  # relative to the output root


@dataclass
class GenerationReport:
    output_root: Path
    definitions: DefinitionsLoad
    documents: list[GeneratedDocument] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.documents)


def _reset_output(root: Path) -> None:
    # deletion failures propagate
    if root.exists():
        logger.info("Removing previous output %s", root)
        shutil.rmtree(root)
    root.mkdir(parents=True, exist_ok=True)


def _write_json(target: Path, doc: dict) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")


async def generate(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> GenerationReport:
    """Regenerate every document under ``settings.output_root``.

    The old output is removed first. If the endpoint source then fails, the
    IngestionError propagates and the output root is left empty rather than
    holding a mix of old and new documents.
    """
    root = settings.output_root
    await asyncio.to_thread(_reset_output, root)

    definitions = await load_definitions(settings.definitions_file)
    endpoints = await fetch_endpoints(
        settings.source_url,
        settings.source_headers,
        timeout=settings.timeout,
        transport=transport,
    )

    report = GenerationReport(output_root=root, definitions=definitions)
    # endpoints are handled in source order so the first claimant keeps a bare operationId
    registry = OperationIdRegistry()
    for endpoint in endpoints:
        group = group_for_module(endpoint.module_id)
        tags = endpoint_tags(endpoint)
        method = normalize_method(endpoint.method)
        operation_id = registry.claim(endpoint)

        relative = document_path(group, tags, method, endpoint.path, operation_id, endpoint.id)
        doc = build_document(endpoint, operation_id, definitions.definitions)
        await asyncio.to_thread(_write_json, root.joinpath(*relative.parts), doc)
        logger.debug("Endpoint %s -> %s", endpoint.id, relative)

        report.documents.append(
            GeneratedDocument(
                endpoint_id=endpoint.id,
                group=group,
                tags=tuple(tags),
                operation_id=operation_id,
                method=method,
                path=endpoint.path,
                title=endpoint.name or operation_id,
                description=endpoint.description,
                relative_path=relative,
            )
        )

    logger.info("Generated %d per-endpoint OpenAPI files into %s", report.count, root)
    return report


def run(settings: Settings) -> int:
    """Synchronous entry point; returns the number of documents written."""
    return asyncio.run(generate(settings)).count
