"""Credential storage and the reveal protocol."""
