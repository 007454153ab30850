from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Iterable, List, Optional

from flatbridge.models import ColumnDescriptor, ConnectionConfig, EndpointKind, Row


class ConnectorState(Enum):
    """State of a connector."""

    CREATED = auto()
    CONFIGURED = auto()
    CLOSED = auto()


class Connector(ABC):
    """Common state shared by all adapters."""

    kind: EndpointKind
    config_class: type

    def __init__(self, config: ConnectionConfig):
        """Initialize a connector.

        Args:
        ----
            config: Typed configuration for this endpoint

        """
        self.state = ConnectorState.CREATED
        self.config = config
        self.configure(config)
        self.state = ConnectorState.CONFIGURED

    def configure(self, config: ConnectionConfig) -> None:
        """Validate the configuration.

        Override in subclasses that need more than a type check.

        Raises
        ------
            TypeError: If the config variant does not belong to this adapter

        """
        if not isinstance(config, self.config_class):
            raise TypeError(
                f"{self.__class__.__name__} expects {self.config_class.__name__}, "
                f"got {type(config).__name__}"
            )

    def close(self) -> None:
        """Release any resources held by the connector."""
        self.state = ConnectorState.CLOSED

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class SourceConnector(Connector):
    """Base class for adapters that rows are read from."""

    @abstractmethod
    def get_schema(self, object_name: Optional[str] = None) -> List[ColumnDescriptor]:
        """Describe the columns of an object.

        Args:
        ----
            object_name: Table name; ignored by single-object sources

        Returns:
        -------
            Ordered column descriptors

        """

    @abstractmethod
    def read(
        self,
        columns: List[str],
        object_name: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """Read rows projected to ``columns``.

        Args:
        ----
            columns: Columns to return, in order
            object_name: Table name; ignored by single-object sources
            limit: Maximum number of rows, or None for everything

        Returns:
        -------
            List of rows

        """


class DestinationConnector(Connector):
    """Base class for adapters that rows are written to."""

    def prepare(self, columns: List[str], object_name: Optional[str] = None) -> None:
        """Make the destination ready to accept rows with ``columns``.

        Called once before the first ``write``, even when there are no rows.
        """

    @abstractmethod
    def write(
        self, columns: List[str], rows: Iterable[Row], object_name: Optional[str] = None
    ) -> int:
        """Write rows and return the number confirmed written.

        Each call is one write unit: a remote insert, or a complete file.
        """
        raise NotImplementedError
