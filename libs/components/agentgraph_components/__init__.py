"""Data and artifact components and their sub-agent associations."""
