"""Client Portal — multi-tenant client records with encrypted credential custody."""

__version__ = "0.1.0"
