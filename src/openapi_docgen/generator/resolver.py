"""Inline ``#/definitions/<id>`` references into self-contained schemas."""

import copy
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

DEFINITION_REF = re.compile(r"^#/definitions/(\d+)$")

CYCLIC = "cyclic reference to #/definitions/{id}"
UNRESOLVED = "unresolved reference to #/definitions/{id}"
_SENTINEL_PREFIXES = ("cyclic reference to ", "unresolved reference to ")


def resolve(schema: Any, definitions: dict[str, dict], visiting: frozenset[str] = frozenset()) -> Any:
    """Return a copy of ``schema`` with every definition reference inlined.

    ``visiting`` holds the ids being expanded further up the call chain. A
    reference back into it becomes a cyclic sentinel, a reference to an
    unknown id becomes an unresolved sentinel. Neither input is mutated.
    """
    if isinstance(schema, list):
        return [resolve(item, definitions, visiting) for item in schema]
    if not isinstance(schema, dict):
        return schema

    ref = schema.get("$ref")
    match = DEFINITION_REF.match(ref) if isinstance(ref, str) else None
    if match:
        def_id = match.group(1)
        if def_id in visiting:
            logger.debug("Cyclic $ref to #/definitions/%s", def_id)
            return _sentinel(CYCLIC, def_id)
        if def_id not in definitions:
            logger.warning("Unresolved $ref: #/definitions/%s", def_id)
            return _sentinel(UNRESOLVED, def_id)
        return resolve(copy.deepcopy(definitions[def_id]), definitions, visiting | {def_id})

    return {key: resolve(value, definitions, visiting) for key, value in schema.items()}


def _sentinel(template: str, def_id: str) -> dict:
    return {"type": "object", "description": template.format(id=def_id)}


def find_sentinels(schema: Any) -> list[str]:
    """List the descriptions of all cyclic/unresolved sentinels inside ``schema``."""
    found: list[str] = []
    if isinstance(schema, list):
        for item in schema:
            found.extend(find_sentinels(item))
    elif isinstance(schema, dict):
        description = schema.get("description")
        if (
            set(schema) == {"type", "description"}
            and schema["type"] == "object"
            and isinstance(description, str)
            and description.startswith(_SENTINEL_PREFIXES)
        ):
            found.append(description)
        else:
            for value in schema.values():
                found.extend(find_sentinels(value))
    return found
