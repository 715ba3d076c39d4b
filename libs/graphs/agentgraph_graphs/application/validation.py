"""Structural checks run on a full graph definition before any write."""

from collections.abc import Iterable
from typing import Any

from agentgraph_common.exceptions.errors import GraphValidationError
from pydantic import ValidationError

from agentgraph_graphs.domain.schemas import FullGraphDefinition


def validate_and_type_graph_data(data: dict[str, Any] | FullGraphDefinition) -> FullGraphDefinition:
    """Parse raw graph data, reporting schema problems as a GraphValidationError."""
    if isinstance(data, FullGraphDefinition):
        return data
    try:
        return FullGraphDefinition.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc']) or 'graph'}: {error['msg']}"
            for error in e.errors()
        ]
        graph_id = data.get("id") if isinstance(data, dict) else None
        raise GraphValidationError(errors, graph_id=graph_id) from e


def collect_graph_errors(
    definition: FullGraphDefinition,
    existing_tool_ids: Iterable[str] = (),
    existing_data_component_ids: Iterable[str] = (),
    existing_artifact_component_ids: Iterable[str] = (),
    existing_function_ids: Iterable[str] = (),
) -> list[str]:
    """Return every structural problem of ``definition``.

    Tool and component references may point at resources declared in the
    payload or already stored in the project.
    """
    errors: list[str] = []
    agent_ids = set(definition.sub_agents)

    if definition.default_sub_agent_id and definition.default_sub_agent_id not in agent_ids:
        errors.append(
            f"Default sub-agent '{definition.default_sub_agent_id}' does not exist in sub-agents"
        )

    tool_ids = (
        set(definition.tools or {}) | set(definition.function_tools or {}) | set(existing_tool_ids)
    )
    data_component_ids = set(definition.data_components or {}) | set(existing_data_component_ids)
    artifact_component_ids = set(definition.artifact_components or {}) | set(
        existing_artifact_component_ids
    )

    function_ids = set(definition.functions or {}) | set(existing_function_ids)
    for function_tool_id, function_tool in (definition.function_tools or {}).items():
        if function_tool.function_id not in function_ids:
            errors.append(
                f"Function tool '{function_tool_id}' references function "
                f"'{function_tool.function_id}' which does not exist"
            )

    for sub_agent_id, agent in definition.internal_sub_agents.items():
        for item in agent.can_use:
            if item.tool_id not in tool_ids:
                errors.append(f"Tool '{item.tool_id}' used by sub-agent '{sub_agent_id}' not found")
        for component_id in agent.data_components or []:
            if component_id not in data_component_ids:
                errors.append(
                    f"Data component '{component_id}' used by sub-agent '{sub_agent_id}' not found"
                )
        for component_id in agent.artifact_components or []:
            if component_id not in artifact_component_ids:
                errors.append(
                    f"Artifact component '{component_id}' used by sub-agent '{sub_agent_id}' "
                    "not found"
                )
        for label, targets in (
            ("transfer", agent.can_transfer_to),
            ("delegate", agent.can_delegate_to),
        ):
            for target_id in targets or []:
                if target_id not in agent_ids:
                    errors.append(
                        f"Sub-agent '{sub_agent_id}' has {label} target '{target_id}' "
                        "that doesn't exist in graph"
                    )
    return errors


def validate_graph_structure(
    definition: FullGraphDefinition,
    existing_tool_ids: Iterable[str] = (),
    existing_data_component_ids: Iterable[str] = (),
    existing_artifact_component_ids: Iterable[str] = (),
    existing_function_ids: Iterable[str] = (),
) -> None:
    """Raise GraphValidationError listing all problems, if there are any."""
    errors = collect_graph_errors(
        definition,
        existing_tool_ids,
        existing_data_component_ids,
        existing_artifact_component_ids,
        existing_function_ids,
    )
    if errors:
        raise GraphValidationError(errors, graph_id=definition.id)
