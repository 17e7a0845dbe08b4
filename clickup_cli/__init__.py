"""
ClickUp CLI - Three-layer architecture for the ClickUp API.

Layers:
- core: Raw types and HTTP client (transport and error normalization)
- sdk: High-level ClickUpClient with nice ergonomics
- cli: Opinionated command-line interface
"""

from clickup_cli.sdk import ClickUpClient

__version__ = "0.1.0"
__all__ = ["ClickUpClient"]
