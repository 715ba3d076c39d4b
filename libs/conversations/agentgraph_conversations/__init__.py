"""Conversation, message, task and ledger-artifact storage."""
