"""Models for the Apifox HTTP API export.

The export is loosely typed and controlled by a third party, so it is
validated once here. Everything downstream works on these models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

JsonSchema = dict[str, Any]


class _SourceModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class HttpParameter(_SourceModel):
    """A path, query, header or cookie parameter."""

    name: str
    required: bool = False
    description: str | None = None
    type: str | None = None
    schema_: JsonSchema | None = Field(default=None, alias="schema")


class ParameterSets(_SourceModel):
    path: list[HttpParameter] | None = None
    query: list[HttpParameter] | None = None
    header: list[HttpParameter] | None = None
    cookie: list[HttpParameter] | None = None


class FormParameter(_SourceModel):
    """A form or multipart field; unnamed fields are skipped when building bodies."""

    name: str | None = None
    required: bool = False
    description: str | None = None
    type: str | None = None  # file / string / integer ...
    schema_: JsonSchema | None = Field(default=None, alias="schema")


class RequestBodySpec(_SourceModel):
    type: str | None = None  # none / application/json / multipart/form-data ...
    parameters: list[FormParameter] | None = None
    json_schema: JsonSchema | None = Field(default=None, alias="jsonSchema")
    media_type: str | None = Field(default=None, alias="mediaType")
    required: bool = False
    description: str | None = None


class ResponseSpec(_SourceModel):
    code: int | str = 200
    name: str | None = None
    description: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")  # json / noContent ...
    media_type: str | None = Field(default=None, alias="mediaType")
    json_schema: JsonSchema | None = Field(default=None, alias="jsonSchema")
    headers: list[Any] | None = None


class AuthSpec(_SourceModel):
    type: str | None = None


class Endpoint(_SourceModel):
    """One HTTP operation from the export."""

    id: int
    name: str | None = None
    description: str | None = None
    operation_id: str | None = Field(default=None, alias="operationId")
    method: str | None = None
    path: str
    tags: list[str | None] | None = None
    module_id: int | None = Field(default=None, alias="moduleId")
    request_body: RequestBodySpec | None = Field(default=None, alias="requestBody")
    parameters: ParameterSets | None = None
    responses: list[ResponseSpec] | None = None
    auth: AuthSpec | None = None


class SourceRoot(_SourceModel):
    """Root of the export: ``{"success": true, "data": [...]}``."""

    success: bool
    data: list[Endpoint]
