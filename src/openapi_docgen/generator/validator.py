"""Structural checks on generated documents."""

import json
from pathlib import Path

from openapi_docgen.generator.document import OPENAPI_VERSION
from openapi_docgen.generator.naming import DOCUMENT_SUFFIX
from openapi_docgen.generator.resolver import DEFINITION_REF
from openapi_docgen.repair import walk_files

HTTP_METHODS = {"get", "put", "post", "delete", "options", "head", "patch", "trace"}


def _definition_refs(value) -> list[str]:
    refs = []
    if isinstance(value, list):
        for item in value:
            refs.extend(_definition_refs(item))
    elif isinstance(value, dict):
        ref = value.get("$ref")
        if isinstance(ref, str) and DEFINITION_REF.match(ref):
            refs.append(ref)
        for item in value.values():
            refs.extend(_definition_refs(item))
    return refs


def validate_document(doc) -> list[str]:
    """Return a list of problems; empty when the document is well formed."""
    if not isinstance(doc, dict):
        return ["document is not an object"]

    problems = []
    if doc.get("openapi") != OPENAPI_VERSION:
        problems.append(f"openapi version is {doc.get('openapi')!r}, expected {OPENAPI_VERSION!r}")

    paths = doc.get("paths")
    if not isinstance(paths, dict) or len(paths) != 1:
        problems.append("document must have exactly one path")
        return problems

    (item,) = paths.values()
    operations = [m for m in item if m in HTTP_METHODS] if isinstance(item, dict) else []
    if len(operations) != 1:
        problems.append("path must have exactly one operation")
        return problems

    operation = item[operations[0]]
    if not operation.get("operationId"):
        problems.append("operation has no operationId")
    if not operation.get("responses"):
        problems.append("operation has no responses")
    for ref in _definition_refs(doc):
        problems.append(f"unresolved {ref}")
    return problems


def operation_id_of(doc) -> str | None:
    try:
        (item,) = doc["paths"].values()
        (operation,) = item.values()
        return operation.get("operationId")
    except (AttributeError, KeyError, TypeError, ValueError):
        return None


def validate_tree(output_root: Path) -> dict[str, list[str]]:
    """Validate every generated document under ``output_root``.

    Returns ``{relative_path: problems}`` for files with problems. Duplicate
    operationIds across files are reported under ``"_operationIds"``.
    """
    errors: dict[str, list[str]] = {}
    seen: dict[str, str] = {}
    duplicates = []

    for path in walk_files(output_root, lambda p: p.name.lower().endswith(DOCUMENT_SUFFIX)):
        name = path.relative_to(output_root).as_posix()
        try:
            doc = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            errors[name] = [f"unreadable: {e}"]
            continue

        problems = validate_document(doc)
        if problems:
            errors[name] = problems

        operation_id = operation_id_of(doc)
        if operation_id:
            if operation_id in seen:
                duplicates.append(f"{operation_id} used by {seen[operation_id]} and {name}")
            else:
                seen[operation_id] = name

    if duplicates:
        errors["_operationIds"] = duplicates
    return errors
