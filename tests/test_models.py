import pytest
from pydantic import ValidationError

from openapi_docgen.source.models import Endpoint, HttpParameter, RequestBodySpec, ResponseSpec


class TestHttpParameter:
    def test_defaults(self):
        p = HttpParameter(name="id")
        assert p.required is False
        assert p.type is None
        assert p.schema_ is None

    def test_schema_alias(self):
        p = HttpParameter.model_validate({"name": "limit", "schema": {"type": "integer"}})
        assert p.schema_ == {"type": "integer"}


class TestEndpoint:
    def test_minimal_endpoint(self):
        ep = Endpoint.model_validate({"id": 1, "path": "/ping"})
        assert ep.method is None
        assert ep.tags is None
        assert ep.responses is None

    def test_camel_case_aliases(self):
        ep = Endpoint.model_validate(
            {
                "id": 7,
                "path": "/users",
                "operationId": "listUsers",
                "moduleId": 6660656,
                "requestBody": {"type": "application/json", "jsonSchema": {"type": "object"}, "mediaType": "application/json"},
                "responses": [{"code": 201, "contentType": "json", "jsonSchema": {"type": "object"}}],
            }
        )
        assert ep.operation_id == "listUsers"
        assert ep.module_id == 6660656
        assert isinstance(ep.request_body, RequestBodySpec)
        assert ep.request_body.json_schema == {"type": "object"}
        assert isinstance(ep.responses[0], ResponseSpec)
        assert ep.responses[0].content_type == "json"

    def test_unknown_keys_ignored(self):
        ep = Endpoint.model_validate({"id": 1, "path": "/", "folderId": 3, "status": "released"})
        assert ep.id == 1

    def test_missing_id_rejected(self):
        with pytest.raises(ValidationError):
            Endpoint.model_validate({"path": "/ping"})

    def test_endpoint_is_immutable(self):
        ep = Endpoint(id=1, path="/ping")
        with pytest.raises(ValidationError):
            ep.path = "/pong"
