"""HTTP boundary for the client portal."""
