"""Storefront MCP Server - inventory catalog and checkout state for a retail backend."""

__version__ = "0.1.0"
