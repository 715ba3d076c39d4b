"""MCP tools, reusable functions and the graph-level function tools built on them."""
