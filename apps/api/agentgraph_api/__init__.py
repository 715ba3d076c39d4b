"""Management REST API for agent graphs."""
