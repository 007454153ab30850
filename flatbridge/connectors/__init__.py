"""Endpoint adapters for flatbridge."""

from flatbridge.connectors.registry import destination_registry, source_registry

# Importing the adapter packages registers them
from flatbridge.connectors import clickhouse, csv  # noqa: E402,F401

__all__ = ["source_registry", "destination_registry"]
