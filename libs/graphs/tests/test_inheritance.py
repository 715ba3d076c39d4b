from agentgraph_graphs.application.inheritance import (
    DEFAULT_TRANSFER_COUNT,
    apply_execution_limits_inheritance,
    cascade_models,
    inherit_step_count,
)
from agentgraph_graphs.domain.schemas import FullGraphDefinition


def definition(**overrides) -> FullGraphDefinition:
    data = {
        "id": "support",
        "name": "Support",
        "subAgents": {
            "router": {"name": "Router"},
            "writer": {"name": "Writer", "stopWhen": {"stepCountIs": 3}},
            "partner": {"name": "Partner", "baseUrl": "https://partner.example.com"},
        },
    }
    data.update(overrides)
    return FullGraphDefinition.model_validate(data)


class TestApplyExecutionLimitsInheritance:
    def test_transfer_count_from_project(self):
        result = apply_execution_limits_inheritance(definition(), {"transferCountIs": 4})
        assert result.stop_when.transfer_count_is == 4

    def test_transfer_count_defaults_to_ten(self):
        result = apply_execution_limits_inheritance(definition(), None)
        assert result.stop_when.transfer_count_is == DEFAULT_TRANSFER_COUNT == 10

    def test_graph_value_is_kept(self):
        result = apply_execution_limits_inheritance(
            definition(stopWhen={"transferCountIs": 2}), {"transferCountIs": 4}
        )
        assert result.stop_when.transfer_count_is == 2

    def test_step_count_only_fills_missing_values(self):
        result = apply_execution_limits_inheritance(definition(), {"stepCountIs": 5})

        agents = result.internal_sub_agents
        assert agents["router"].stop_when.step_count_is == 5
        assert agents["writer"].stop_when.step_count_is == 3
        assert "partner" not in agents

    def test_input_is_not_mutated(self):
        original = definition()
        apply_execution_limits_inheritance(original, {"stepCountIs": 5})

        assert original.stop_when is None
        assert original.internal_sub_agents["router"].stop_when is None


class TestInheritStepCount:
    def test_fills_missing(self):
        assert inherit_step_count(None, {"stepCountIs": 5}) == {"stepCountIs": 5}

    def test_own_value_wins(self):
        assert inherit_step_count({"stepCountIs": 2}, {"stepCountIs": 5}) == {"stepCountIs": 2}

    def test_no_project_value(self):
        assert inherit_step_count(None, {"transferCountIs": 3}) is None


class TestCascadeModels:
    OLD_GRAPH = {"base": {"model": "openai/gpt-4o"}}
    NEW_GRAPH = {"base": {"model": "anthropic/claude-sonnet"}}

    def test_inheriting_slot_follows_graph(self):
        stored = {"base": {"model": "openai/gpt-4o"}}
        result = cascade_models(stored, stored, self.OLD_GRAPH, self.NEW_GRAPH)
        assert result == {"base": {"model": "anthropic/claude-sonnet"}}

    def test_custom_slot_is_kept(self):
        stored = {"base": {"model": "google/gemini"}}
        assert cascade_models(stored, stored, self.OLD_GRAPH, self.NEW_GRAPH) == stored

    def test_provider_options_change_cascades(self):
        stored = {"base": {"model": "openai/gpt-4o"}}
        new_graph = {"base": {"model": "openai/gpt-4o", "providerOptions": {"temperature": 0.2}}}

        result = cascade_models(stored, stored, self.OLD_GRAPH, new_graph)

        assert result["base"]["providerOptions"] == {"temperature": 0.2}

    def test_new_agent_gets_incoming_value(self):
        incoming = {"summarizer": {"model": "openai/gpt-4o-mini"}}
        assert cascade_models(incoming, None, self.OLD_GRAPH, self.NEW_GRAPH) is incoming
