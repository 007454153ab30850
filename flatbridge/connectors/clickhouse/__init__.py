from flatbridge.connectors.registry import destination_registry, source_registry
from flatbridge.models import EndpointKind

from .destination import ClickHouseDestination
from .source import ClickHouseSource

source_registry.register(EndpointKind.TABULAR_STORE, ClickHouseSource)
destination_registry.register(EndpointKind.TABULAR_STORE, ClickHouseDestination)

__all__ = ["ClickHouseSource", "ClickHouseDestination"]
