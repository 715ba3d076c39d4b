"""Normalise the input schema of tools returned by MCP servers.

Servers and SDKs disagree on where a tool's JSON schema lives. The lookup
order is ``inputSchema``, ``parameters.properties`` (wrapped into an object
schema), ``parameters`` and finally ``schema``.
"""

from typing import Any


def normalize_tool_input_schema(tool: dict[str, Any]) -> dict[str, Any]:
    input_schema = tool.get("inputSchema")
    if isinstance(input_schema, dict):
        return input_schema

    parameters = tool.get("parameters")
    if isinstance(parameters, dict):
        properties = parameters.get("properties")
        if isinstance(properties, dict):
            return {
                "type": "object",
                "properties": properties,
                "required": list(parameters.get("required") or []),
            }
        return parameters

    schema = tool.get("schema")
    if isinstance(schema, dict):
        return schema

    return {}


def normalize_tool_definition(tool: dict[str, Any]) -> dict[str, Any]:
    """Reduce a discovered tool to ``{"name", "description", "inputSchema"}``."""
    return {
        "name": tool.get("name"),
        "description": tool.get("description"),
        "inputSchema": normalize_tool_input_schema(tool),
    }
