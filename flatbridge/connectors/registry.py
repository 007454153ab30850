from typing import Dict, Generic, Type, TypeVar

from flatbridge.connectors.base.connector import DestinationConnector, SourceConnector
from flatbridge.models import EndpointKind

C = TypeVar("C")


class ConnectorRegistry(Generic[C]):
    """Registry mapping an endpoint kind to its adapter class."""

    def __init__(self, role: str):
        self.role = role
        self._connectors: Dict[EndpointKind, Type[C]] = {}

    def register(self, kind: EndpointKind, connector_class: Type[C]) -> None:
        """Register an adapter class for an endpoint kind."""
        self._connectors[kind] = connector_class

    def get(self, kind: EndpointKind) -> Type[C]:
        """Get the adapter class for an endpoint kind."""
        if kind not in self._connectors:
            raise ValueError(f"Unknown {self.role} connector type: {kind.value}")
        return self._connectors[kind]


source_registry: ConnectorRegistry[SourceConnector] = ConnectorRegistry("source")
destination_registry: ConnectorRegistry[DestinationConnector] = ConnectorRegistry(
    "destination"
)
