from agentgraph_tools.domain.schema_normalization import (
    normalize_tool_definition,
    normalize_tool_input_schema,
)

OBJECT_SCHEMA = {"type": "object", "properties": {"q": {"type": "string"}}}


class TestNormalizeToolInputSchema:
    def test_input_schema_wins(self):
        tool = {"inputSchema": OBJECT_SCHEMA, "parameters": {"type": "object"}, "schema": {}}
        assert normalize_tool_input_schema(tool) is OBJECT_SCHEMA

    def test_parameter_properties_are_wrapped(self):
        tool = {"parameters": {"properties": {"q": {"type": "string"}}, "required": ["q"]}}
        assert normalize_tool_input_schema(tool) == {
            "type": "object",
            "properties": {"q": {"type": "string"}},
            "required": ["q"],
        }

    def test_parameters_without_properties_used_as_is(self):
        parameters = {"type": "string"}
        assert normalize_tool_input_schema({"parameters": parameters}) is parameters

    def test_schema_is_last_resort(self):
        assert normalize_tool_input_schema({"schema": OBJECT_SCHEMA}) is OBJECT_SCHEMA

    def test_nothing_found(self):
        assert normalize_tool_input_schema({"inputSchema": "not a dict"}) == {}


def test_normalize_tool_definition_drops_other_keys():
    tool = {"name": "search", "description": "Web search", "schema": OBJECT_SCHEMA, "extra": 1}
    assert normalize_tool_definition(tool) == {
        "name": "search",
        "description": "Web search",
        "inputSchema": OBJECT_SCHEMA,
    }
