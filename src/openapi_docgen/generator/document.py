"""Build one OpenAPI 3.1 document per endpoint."""

import logging
import re

from openapi_docgen.generator.resolver import resolve
from openapi_docgen.source.models import Endpoint, FormParameter, HttpParameter

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.1.0"
DEFAULT_MEDIA_TYPE = "application/json"
PARAMETER_LOCATIONS = ("path", "query", "header", "cookie")

# Observed module ids: 6656265 is the AI model API, 6660656 the admin API.
# Anything else, including a missing id, falls into the AI model group.
MANAGEMENT_MODULE_ID = 6660656
MANAGEMENT_GROUP = "management"
DEFAULT_GROUP = "ai-model"

SECURITY_SCHEMES = {
    "bearer": ("bearerAuth", {"type": "http", "scheme": "bearer"}),
    "basic": ("basicAuth", {"type": "http", "scheme": "basic"}),
    "apikey": ("apiKeyAuth", {"type": "apiKey", "in": "header", "name": "Authorization"}),
}


def normalize_method(method: str | None) -> str:
    return (method or "").strip().lower() or "get"


def slugify(text: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to '-', never empty."""
    s = text.strip().lower()
    s = re.sub(r"https?://", "", s)
    s = re.sub(r"[^a-z0-9]+", "-", s).strip("-")
    return s or "endpoint"


def group_for_module(module_id: int | None) -> str:
    return MANAGEMENT_GROUP if module_id == MANAGEMENT_MODULE_ID else DEFAULT_GROUP


def endpoint_tags(endpoint: Endpoint) -> list[str]:
    """Declared tags with blanks replaced by 'default'; ['default'] if there are none."""
    if not endpoint.tags:
        return ["default"]
    return [tag or "default" for tag in endpoint.tags]


class OperationIdRegistry:
    """operationIds handed out so far in one generation run.

    The first endpoint to claim an id gets it bare; later ones get their
    numeric endpoint id appended.
    """

    def __init__(self):
        self._used: set[str] = set()

    def __contains__(self, operation_id: str) -> bool:
        return operation_id in self._used

    def __len__(self) -> int:
        return len(self._used)

    def claim(self, endpoint: Endpoint) -> str:
        base = derive_operation_id(endpoint)
        candidate = base
        if candidate in self._used:
            candidate = f"{base}-{endpoint.id}"
            n = 2
            while candidate in self._used:
                candidate = f"{base}-{endpoint.id}-{n}"
                n += 1
            logger.debug("operationId %r already used, endpoint %s gets %r", base, endpoint.id, candidate)
        self._used.add(candidate)
        return candidate


def derive_operation_id(endpoint: Endpoint) -> str:
    hint = (endpoint.operation_id or "").strip()
    if not hint:
        method = normalize_method(endpoint.method)
        hint = re.sub(r"/+", "-", re.sub(r"[{}]", "", f"{method}-{endpoint.path}"))
    return slugify(hint)


def _parameter(param: HttpParameter, location: str, definitions: dict[str, dict]) -> dict:
    if param.schema_ is not None:
        schema = resolve(param.schema_, definitions)
    elif param.type:
        schema = {"type": param.type}
    else:
        schema = {"type": "string"}

    result = {
        "name": param.name,
        "in": location,
        # OpenAPI requires path parameters to be required
        "required": True if location == "path" else param.required,
    }
    if param.description:
        result["description"] = param.description
    result["schema"] = schema
    return result


def build_parameters(endpoint: Endpoint, definitions: dict[str, dict]) -> list[dict]:
    sets = endpoint.parameters
    if sets is None:
        return []
    params = []
    for location in PARAMETER_LOCATIONS:
        for param in getattr(sets, location) or []:
            params.append(_parameter(param, location, definitions))
    return params


def _form_property(param: FormParameter, definitions: dict[str, dict]) -> dict:
    if param.schema_ is not None:
        prop = resolve(param.schema_, definitions)
    elif param.type == "file":
        prop = {"type": "string", "format": "binary"}
    elif param.type:
        prop = {"type": param.type}
    else:
        prop = {"type": "string"}
    description = param.description or prop.get("description")
    if description:
        prop = {**prop, "description": description}
    return prop


def build_request_body(endpoint: Endpoint, definitions: dict[str, dict]) -> dict | None:
    """Request body object, or None when the endpoint declares no body."""
    body = endpoint.request_body
    if body is None:
        return None
    body_type = (body.type or "").strip()
    if not body_type or body_type.lower() == "none":
        return None

    media_type = body.media_type or (body_type if "/" in body_type else None) or DEFAULT_MEDIA_TYPE

    if body.parameters and body.json_schema is None:
        # form-style bodies list their fields instead of carrying a schema
        properties: dict[str, dict] = {}
        required: list[str] = []
        for param in body.parameters:
            if not param.name:
                continue
            properties[param.name] = _form_property(param, definitions)
            if param.required:
                required.append(param.name)
        schema: dict = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
    elif body.json_schema is not None:
        schema = resolve(body.json_schema, definitions)
    else:
        return {"required": body.required, "content": {media_type: {"schema": {"type": "object"}}}}

    result: dict = {"required": body.required}
    if body.description:
        result["description"] = body.description
    result["content"] = {media_type: {"schema": schema}}
    return result


def build_responses(endpoint: Endpoint, definitions: dict[str, dict]) -> dict[str, dict]:
    """Response map; never empty."""
    responses: dict[str, dict] = {}
    for response in endpoint.responses or []:
        code = str(response.code)
        description = response.description or response.name or "Response"
        no_content = (response.content_type or "").lower() == "nocontent"
        if no_content or response.json_schema is None:
            responses[code] = {"description": description}
            continue
        media_type = response.media_type or DEFAULT_MEDIA_TYPE
        responses[code] = {
            "description": description,
            "content": {media_type: {"schema": resolve(response.json_schema, definitions)}},
        }

    if not responses:
        responses["200"] = {"description": "OK"}
    return responses


def build_security(endpoint: Endpoint) -> tuple[str, dict] | None:
    """(scheme name, security scheme) for the endpoint's auth, if it has one we know."""
    if endpoint.auth is None or not endpoint.auth.type:
        return None
    kind = re.sub(r"[^a-z]", "", endpoint.auth.type.lower())
    scheme = SECURITY_SCHEMES.get(kind)
    if scheme is None and kind not in ("none", "noauth", "inherit"):
        logger.debug("Endpoint %s: ignoring unsupported auth type %r", endpoint.id, endpoint.auth.type)
    return scheme


def build_document(endpoint: Endpoint, operation_id: str, definitions: dict[str, dict]) -> dict:
    """Self-contained OpenAPI document with exactly one path and one operation."""
    method = normalize_method(endpoint.method)
    tags = endpoint_tags(endpoint)

    operation: dict = {"tags": tags}
    if endpoint.name:
        operation["summary"] = endpoint.name
    if endpoint.description:
        operation["description"] = endpoint.description
    operation["operationId"] = operation_id
    operation["parameters"] = build_parameters(endpoint, definitions)
    request_body = build_request_body(endpoint, definitions)
    if request_body is not None:
        operation["requestBody"] = request_body
    operation["responses"] = build_responses(endpoint, definitions)

    info: dict = {"title": endpoint.name or operation_id, "version": "1.0.0"}
    if endpoint.description:
        info["description"] = endpoint.description

    doc: dict = {
        "openapi": OPENAPI_VERSION,
        "info": info,
        "tags": [{"name": name} for name in dict.fromkeys(tags)],
        "paths": {endpoint.path: {method: operation}},
    }

    security = build_security(endpoint)
    if security is not None:
        name, scheme = security
        operation["security"] = [{name: []}]
        doc["components"] = {"securitySchemes": {name: scheme}}
    return doc
