from flatbridge.connectors.registry import destination_registry, source_registry
from flatbridge.models import EndpointKind

from .destination import CSVDestination
from .source import CSVSource

source_registry.register(EndpointKind.DELIMITED_FILE, CSVSource)
destination_registry.register(EndpointKind.DELIMITED_FILE, CSVDestination)

__all__ = ["CSVSource", "CSVDestination"]
