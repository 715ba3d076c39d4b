"""Context configurations and the conversation-scoped context cache."""
