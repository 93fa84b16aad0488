"""File placement for generated documents.

Tag names and titles are free text from the source system, so every path
segment is made safe for Windows and case-insensitive filesystems.
"""

import re
from pathlib import PurePosixPath

from openapi_docgen.generator.document import slugify

MAX_SEGMENT = 120
DOCUMENT_SUFFIX = ".json"

_ILLEGAL = re.compile(r'[<>:"/\\|?*]+')


def sanitize_segment(text: str) -> str:
    s = _ILLEGAL.sub("-", text.strip())
    s = re.sub(r"\s+", " ", s)
    s = re.sub(r"\.+$", "", s).strip()
    return s[:MAX_SEGMENT]


def tag_path(tag: str) -> list[str]:
    """Split a 'parent/child' tag into sanitized directory segments."""
    return [sanitize_segment(part) for part in (tag or "default").split("/")]


def document_filename(method: str, path: str, operation_id: str, endpoint_id: int) -> str:
    # the endpoint id keeps names unique even when everything else collides,
    # so only the head is shortened and the id always survives
    suffix = f"-{endpoint_id}"
    head = sanitize_segment(f"{method}-{slugify(path)}-{operation_id}")
    head = head[: MAX_SEGMENT - len(suffix)].rstrip(" .")
    return head + suffix + DOCUMENT_SUFFIX


def document_path(
    group: str,
    tags: list[str],
    method: str,
    path: str,
    operation_id: str,
    endpoint_id: int,
) -> PurePosixPath:
    """Path of the document relative to the output root."""
    first_tag = tags[0] if tags else "default"
    return PurePosixPath(group, *tag_path(first_tag), document_filename(method, path, operation_id, endpoint_id))
