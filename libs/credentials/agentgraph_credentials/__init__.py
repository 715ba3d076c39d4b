"""Credential references and the pluggable stores that hold the secrets."""
