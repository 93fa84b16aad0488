"""Schema definitions from a local Apifox project export.

The export is optional. Endpoints with fully inlined schemas need no
definitions, so every failure here degrades to an empty map.
"""

import asyncio
import enum
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFINITION_ID = re.compile(r"^#/definitions/(\d+)$")


class LoadStatus(enum.Enum):
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    LOADED = "loaded"


@dataclass(frozen=True)
class DefinitionsLoad:
    """Outcome of loading the definitions export."""

    status: LoadStatus
    path: Path
    definitions: dict[str, dict] = field(default_factory=dict)
    reason: str = ""


def extract_definitions(project: Any) -> dict[str, dict]:
    """Collect ``id -> jsonSchema`` from ``schemaCollection`` (walks nested ``items``)."""
    definitions: dict[str, dict] = {}
    if not isinstance(project, dict):
        return definitions
    collection = project.get("schemaCollection")
    if isinstance(collection, list):
        _walk(collection, definitions)
    return definitions


def _walk(nodes: list, definitions: dict[str, dict]) -> None:
    for node in nodes:
        if not isinstance(node, dict):
            continue
        node_id = node.get("id")
        match = DEFINITION_ID.match(node_id) if isinstance(node_id, str) else None
        schema = node.get("schema")
        json_schema = schema.get("jsonSchema") if isinstance(schema, dict) else None
        if match and isinstance(json_schema, dict):
            definitions[match.group(1)] = json_schema
        if isinstance(node.get("items"), list):
            _walk(node["items"], definitions)


def _parse(text: str, path: Path) -> Any:
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


async def load_definitions(path: Path) -> DefinitionsLoad:
    """Load definitions from ``path``; never raises."""
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Apifox project file not found: %s", path)
        return DefinitionsLoad(LoadStatus.NOT_FOUND, path, reason="file not found")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Apifox project file unreadable: %s (%s)", path, e)
        return DefinitionsLoad(LoadStatus.INVALID, path, reason=str(e))

    try:
        project = _parse(text, path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.warning("Apifox project file is malformed: %s (%s)", path, e)
        return DefinitionsLoad(LoadStatus.INVALID, path, reason=str(e))

    if not isinstance(project, dict):
        logger.warning("Apifox project file has no object root: %s", path)
        return DefinitionsLoad(LoadStatus.INVALID, path, reason="root is not an object")

    definitions = extract_definitions(project)
    if definitions:
        logger.info("Loaded %d schema definitions from %s", len(definitions), path)
    else:
        logger.warning("No schema definitions found in %s", path)
    return DefinitionsLoad(LoadStatus.LOADED, path, definitions)
