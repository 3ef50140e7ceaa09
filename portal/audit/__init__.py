"""Append-only audit of secret reveals."""
