"""Tenants and the domain, hosting, document and ticket records they own."""
