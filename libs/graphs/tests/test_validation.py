import pytest
from agentgraph_common.exceptions.errors import GraphValidationError, RelationTargetError
from agentgraph_graphs.application.validation import (
    collect_graph_errors,
    validate_and_type_graph_data,
    validate_graph_structure,
)
from agentgraph_graphs.domain.schemas import (
    ExternalAgentDefinition,
    ExternalTarget,
    FullGraphDefinition,
    InternalTarget,
    SubAgentRelationCreate,
    resolve_relation_target,
)
from pydantic import ValidationError


def graph(**overrides) -> FullGraphDefinition:
    data = {
        "id": "support",
        "name": "Support",
        "defaultSubAgentId": "router",
        "subAgents": {
            "router": {"name": "Router", "canTransferTo": ["writer"]},
            "writer": {"name": "Writer"},
        },
    }
    data.update(overrides)
    return FullGraphDefinition.model_validate(data)


class TestResolveRelationTarget:
    def test_internal(self):
        assert resolve_relation_target("writer", None) == InternalTarget(sub_agent_id="writer")

    def test_external(self):
        target = resolve_relation_target(None, "partner")
        assert target == ExternalTarget(external_agent_id="partner")

    def test_both(self):
        with pytest.raises(RelationTargetError, match="Cannot specify both"):
            resolve_relation_target("writer", "partner")

    def test_neither(self):
        with pytest.raises(RelationTargetError, match="Must specify either"):
            resolve_relation_target(None, None)

    def test_relation_payload_with_both_targets_is_invalid(self):
        with pytest.raises(ValidationError):
            SubAgentRelationCreate.model_validate(
                {
                    "sourceSubAgentId": "router",
                    "targetSubAgentId": "writer",
                    "externalAgentId": "partner",
                    "relationType": "transfer",
                }
            )


class TestFullGraphDefinition:
    def test_ids_filled_from_keys(self):
        assert graph().sub_agents["router"].id == "router"

    def test_external_agent_detected_by_base_url(self):
        typed = graph(
            subAgents={"partner": {"name": "Partner", "baseUrl": "https://partner.example.com"}},
            defaultSubAgentId=None,
        )
        assert isinstance(typed.sub_agents["partner"], ExternalAgentDefinition)
        assert typed.internal_sub_agents == {}

    def test_key_id_mismatch(self):
        with pytest.raises(ValidationError, match="does not match its id"):
            graph(subAgents={"router": {"id": "other", "name": "Router"}})

    @pytest.mark.parametrize("key", ["bad id/../x", "", "x" * 256])
    def test_sub_agent_keys_must_be_resource_ids(self, key):
        with pytest.raises(ValidationError):
            graph(subAgents={key: {"name": "X"}}, defaultSubAgentId=None)


class TestGraphValidation:
    def test_valid_graph(self):
        assert collect_graph_errors(graph()) == []

    def test_every_problem_is_reported(self):
        typed = graph(
            defaultSubAgentId="missing",
            subAgents={
                "router": {
                    "name": "Router",
                    "canUse": [{"toolId": "search"}],
                    "dataComponents": ["weather-card"],
                    "artifactComponents": ["report"],
                    "canDelegateTo": ["ghost"],
                }
            },
        )

        with pytest.raises(GraphValidationError) as exc_info:
            validate_graph_structure(typed)

        errors = exc_info.value.errors
        assert len(errors) == 5
        assert "Default sub-agent 'missing' does not exist in sub-agents" in errors
        assert "Tool 'search' used by sub-agent 'router' not found" in errors
        assert any("delegate target 'ghost'" in error for error in errors)

    def test_references_may_point_at_stored_resources(self):
        typed = graph(
            subAgents={
                "router": {
                    "name": "Router",
                    "canUse": [{"toolId": "search"}],
                    "dataComponents": ["weather-card"],
                }
            },
        )
        errors = collect_graph_errors(
            typed, existing_tool_ids=["search"], existing_data_component_ids=["weather-card"]
        )
        assert errors == []

    def test_function_tool_needs_function(self):
        typed = graph(functionTools={"calc": {"id": "calc", "name": "Calc", "functionId": "fn"}})
        assert collect_graph_errors(typed) == [
            "Function tool 'calc' references function 'fn' which does not exist"
        ]

    def test_raw_data_errors_become_graph_validation_error(self):
        with pytest.raises(GraphValidationError) as exc_info:
            validate_and_type_graph_data({"id": "support"})

        assert exc_info.value.resource_id == "support"
        assert any(error.startswith("name:") for error in exc_info.value.errors)

    def test_non_mapping_data_becomes_graph_validation_error(self):
        with pytest.raises(GraphValidationError) as exc_info:
            validate_and_type_graph_data(["support"])

        assert exc_info.value.resource_id is None
