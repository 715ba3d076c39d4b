"""Projects: the top-level tenant container and its inheritable defaults."""
