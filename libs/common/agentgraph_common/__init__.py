"""Shared building blocks of the agent graph platform."""
