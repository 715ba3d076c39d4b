"""Registers every ORM model on the shared metadata.

Import this module before ``Database.create_all`` so that all tables exist.
"""

from agentgraph_components.domain import models as component_models
from agentgraph_context.domain import models as context_models
from agentgraph_conversations.domain import models as conversation_models
from agentgraph_credentials.domain import models as credential_models
from agentgraph_graphs.domain import models as graph_models
from agentgraph_projects.domain import models as project_models
from agentgraph_tools.domain import models as tool_models

ORM_MODULES = (
    project_models,
    tool_models,
    component_models,
    context_models,
    credential_models,
    graph_models,
    conversation_models,
)
