from typing import Iterable, List, Optional

from flatbridge.connectors.base.connector import DestinationConnector
from flatbridge.connectors.clickhouse.utils import (
    ClickHouseClientMixin,
    quote_identifier,
    validate_identifier,
)
from flatbridge.exceptions import ValidationError
from flatbridge.logging import get_logger
from flatbridge.models import EndpointKind, Row, TabularStoreConfig

logger = get_logger(__name__)

TEXT_COLUMN_TYPE = "Nullable(String)"


class ClickHouseDestination(ClickHouseClientMixin, DestinationConnector):
    """
    Connector for appending rows to a ClickHouse table.
    """

    kind = EndpointKind.TABULAR_STORE
    config_class = TabularStoreConfig

    def ensure_table(self, table_name: str, columns: List[str]) -> None:
        """Create ``table_name`` with every column typed as text, if absent.

        Repeated calls with the same shape are no-ops on the server.
        """
        if not columns:
            raise ValidationError("No columns selected")
        column_defs = ", ".join(
            f"{quote_identifier(name)} {TEXT_COLUMN_TYPE}" for name in columns
        )
        self._command(
            f"CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} "
            f"({column_defs}) ENGINE = MergeTree() ORDER BY tuple()"
        )
        logger.debug(f"Ensured table {table_name} with {len(columns)} columns")

    def insert_batch(self, table_name: str, columns: List[str], rows: Iterable[Row]) -> int:
        """Append ``rows`` to ``table_name`` in one remote insert.

        Returns:
            Number of rows inserted
        """
        validate_identifier(table_name, "table name")
        for name in columns:
            validate_identifier(name, "column name")

        data = [[row.get(name) for name in columns] for row in rows]
        if not data:
            return 0

        self._insert(table_name, data, columns)
        logger.debug(f"Inserted {len(data)} rows into {table_name}")
        return len(data)

    def prepare(self, columns: List[str], object_name: Optional[str] = None) -> None:
        self.ensure_table(object_name or "", columns)

    def write(
        self, columns: List[str], rows: Iterable[Row], object_name: Optional[str] = None
    ) -> int:
        return self.insert_batch(object_name or "", columns, rows)

    def close(self) -> None:
        self._close_client()
        super().close()
