from .connector import Connector, ConnectorState, DestinationConnector, SourceConnector

__all__ = [
    "Connector",
    "ConnectorState",
    "SourceConnector",
    "DestinationConnector",
]
