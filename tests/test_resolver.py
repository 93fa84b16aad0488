import copy

from openapi_docgen.generator.resolver import find_sentinels, resolve

DEFS = {
    "1": {"type": "object", "properties": {"child": {"$ref": "#/definitions/2"}}},
    "2": {"type": "object", "properties": {"name": {"type": "string"}}},
    "10": {"type": "object", "properties": {"next": {"$ref": "#/definitions/11"}}},
    "11": {"type": "object", "properties": {"back": {"$ref": "#/definitions/10"}}},
}


class TestResolve:
    def test_scalars_pass_through(self):
        assert resolve("text", DEFS) == "text"
        assert resolve(3, DEFS) == 3
        assert resolve(None, DEFS) is None

    def test_acyclic_graph_fully_inlined(self):
        result = resolve({"$ref": "#/definitions/1"}, DEFS)
        assert result == {
            "type": "object",
            "properties": {"child": {"type": "object", "properties": {"name": {"type": "string"}}}},
        }
        assert find_sentinels(result) == []

    def test_cycle_yields_sentinel(self):
        result = resolve({"$ref": "#/definitions/10"}, DEFS)
        back = result["properties"]["next"]["properties"]["back"]
        assert back == {"type": "object", "description": "cyclic reference to #/definitions/10"}
        assert find_sentinels(result) == ["cyclic reference to #/definitions/10"]

    def test_self_reference(self):
        defs = {"5": {"type": "array", "items": {"$ref": "#/definitions/5"}}}
        result = resolve({"$ref": "#/definitions/5"}, defs)
        assert result["items"]["description"] == "cyclic reference to #/definitions/5"

    def test_missing_definition_yields_sentinel(self):
        result = resolve({"properties": {"x": {"$ref": "#/definitions/404"}}}, DEFS)
        assert result["properties"]["x"] == {
            "type": "object",
            "description": "unresolved reference to #/definitions/404",
        }

    def test_siblings_may_share_a_definition(self):
        schema = {"properties": {"a": {"$ref": "#/definitions/2"}, "b": {"$ref": "#/definitions/2"}}}
        result = resolve(schema, DEFS)
        assert result["properties"]["a"] == DEFS["2"]
        assert result["properties"]["b"] == DEFS["2"]
        assert find_sentinels(result) == []

    def test_arrays_and_composites(self):
        schema = {"oneOf": [{"$ref": "#/definitions/2"}, {"type": "null"}], "enum": ["a", "b"]}
        result = resolve(schema, DEFS)
        assert result["oneOf"][0] == DEFS["2"]
        assert result["oneOf"][1] == {"type": "null"}
        assert result["enum"] == ["a", "b"]

    def test_other_refs_left_alone(self):
        schema = {"$ref": "#/components/schemas/User"}
        assert resolve(schema, DEFS) == schema

    def test_inputs_not_mutated(self):
        defs = copy.deepcopy(DEFS)
        schema = {"items": {"$ref": "#/definitions/1"}}
        snapshot = copy.deepcopy(schema)
        result = resolve(schema, defs)
        result["items"]["properties"]["child"]["type"] = "changed"
        assert schema == snapshot
        assert defs == DEFS

    def test_deterministic(self):
        schema = {"properties": {"a": {"$ref": "#/definitions/10"}, "b": {"$ref": "#/definitions/1"}}}
        assert resolve(schema, DEFS) == resolve(schema, DEFS)
