"""Execution-limit and model-setting inheritance between project, graph and sub-agents.

Everything here is pure: functions take definitions and stored JSON values
and return new values, leaving persistence to the caller.
"""

import logging
from typing import Any

from agentgraph_projects.domain.schemas import MODEL_SLOTS, GraphStopWhen, SubAgentStopWhen

from agentgraph_graphs.domain.schemas import FullGraphDefinition

logger = logging.getLogger(__name__)

DEFAULT_TRANSFER_COUNT = 10


def apply_execution_limits_inheritance(
    definition: FullGraphDefinition, project_stop_when: dict[str, Any] | None
) -> FullGraphDefinition:
    """Return a copy of ``definition`` with project limits filled in.

    The graph inherits ``transferCountIs`` from the project, defaulting to
    10; internal sub-agents without ``stepCountIs`` inherit the project's.
    """
    result = definition.model_copy(deep=True)
    project_stop_when = project_stop_when or {}

    graph_stop_when = result.stop_when or GraphStopWhen()
    if graph_stop_when.transfer_count_is is None:
        inherited = project_stop_when.get("transferCountIs")
        graph_stop_when.transfer_count_is = (
            inherited if inherited is not None else DEFAULT_TRANSFER_COUNT
        )
        logger.info(
            "Graph inherited transferCountIs",
            extra={"graph_id": result.id, "transfer_count_is": graph_stop_when.transfer_count_is},
        )
    result.stop_when = graph_stop_when

    step_count = project_stop_when.get("stepCountIs")
    if step_count is not None:
        for sub_agent_id, agent in result.internal_sub_agents.items():
            agent_stop_when = agent.stop_when or SubAgentStopWhen()
            if agent_stop_when.step_count_is is None:
                agent_stop_when.step_count_is = step_count
                logger.info(
                    "Sub-agent inherited stepCountIs from project",
                    extra={"sub_agent_id": sub_agent_id, "step_count_is": step_count},
                )
            agent.stop_when = agent_stop_when
    return result


def inherit_step_count(
    stop_when: dict[str, Any] | None, project_stop_when: dict[str, Any] | None
) -> dict[str, Any] | None:
    """Sub-agent ``stopWhen`` as seen through the project's ``stepCountIs``."""
    step_count = (project_stop_when or {}).get("stepCountIs")
    if step_count is None or (stop_when or {}).get("stepCountIs") is not None:
        return stop_when
    return {**(stop_when or {}), "stepCountIs": step_count}


def cascade_models(
    incoming: dict[str, Any] | None,
    stored: dict[str, Any] | None,
    old_graph_models: dict[str, Any] | None,
    new_graph_models: dict[str, Any] | None,
) -> dict[str, Any] | None:
    """Sub-agent models after a graph model change.

    A slot whose stored model equals the old graph model was inheriting it;
    it follows the new graph slot when the model name or its provider
    options changed. Other slots keep the incoming value.
    """
    if not stored or not new_graph_models:
        return incoming

    result = dict(incoming or {})
    old_graph_models = old_graph_models or {}
    for slot in MODEL_SLOTS:
        agent_slot = stored.get(slot) or {}
        old_slot = old_graph_models.get(slot) or {}
        new_slot = new_graph_models.get(slot)
        if not (agent_slot.get("model") and old_slot.get("model") and new_slot):
            continue
        if agent_slot["model"] != old_slot["model"]:
            continue
        if new_slot.get("model") != old_slot.get("model") or new_slot.get(
            "providerOptions"
        ) != old_slot.get("providerOptions"):
            result[slot] = new_slot
            logger.info(
                "Cascading model change from graph to sub-agent",
                extra={
                    "model_slot": slot,
                    "old_model": agent_slot["model"],
                    "new_model": new_slot.get("model"),
                },
            )
    return result or None
