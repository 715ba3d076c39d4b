"""Model settings and execution limits shared by projects, graphs and sub-agents."""

from typing import Any

from agentgraph_common.base.schemas import CamelModel, ResourceId
from pydantic import Field


class ModelSettings(CamelModel):
    model: str | None = None
    provider_options: dict[str, Any] | None = None


class Models(CamelModel):
    """Per-slot model settings."""

    base: ModelSettings | None = None
    structured_output: ModelSettings | None = None
    summarizer: ModelSettings | None = None


MODEL_SLOTS = ("base", "structuredOutput", "summarizer")


class StopWhen(CamelModel):
    """Execution limits: transfers per conversation and steps per sub-agent."""

    transfer_count_is: int | None = Field(default=None, ge=1, le=100)
    step_count_is: int | None = Field(default=None, ge=1, le=1000)


class GraphStopWhen(CamelModel):
    transfer_count_is: int | None = Field(default=None, ge=1, le=100)


class SubAgentStopWhen(CamelModel):
    step_count_is: int | None = Field(default=None, ge=1, le=1000)


class SandboxConfig(CamelModel):
    provider: str | None = None
    runtime: str | None = None
    timeout: int | None = Field(default=None, ge=1)
    vcpus: int | None = Field(default=None, ge=1)


class ProjectCreate(CamelModel):
    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    models: Models | None = None
    stop_when: StopWhen | None = None
    sandbox_config: SandboxConfig | None = None


class ProjectUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    models: Models | None = None
    stop_when: StopWhen | None = None
    sandbox_config: SandboxConfig | None = None
