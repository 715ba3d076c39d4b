"""Agent graphs, sub-agents, their relations and the full-graph cascade."""
