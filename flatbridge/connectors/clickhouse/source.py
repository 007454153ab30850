from typing import List, Optional

from flatbridge.connectors.base.connector import SourceConnector
from flatbridge.connectors.clickhouse.utils import (
    ClickHouseClientMixin,
    column_list,
    quote_identifier,
)
from flatbridge.core.projection import project_rows
from flatbridge.exceptions import ValidationError
from flatbridge.logging import get_logger
from flatbridge.models import ColumnDescriptor, EndpointKind, Row, TabularStoreConfig

logger = get_logger(__name__)


class ClickHouseSource(ClickHouseClientMixin, SourceConnector):
    """
    Connector for reading tables from ClickHouse over its HTTP interface.
    """

    kind = EndpointKind.TABULAR_STORE
    config_class = TabularStoreConfig

    def list_tables(self) -> List[str]:
        """Open a session and list the tables of the configured database."""
        result = self._query("SHOW TABLES")
        tables = [row[0] for row in result.result_rows]
        logger.info(f"Found {len(tables)} tables at {self.config.endpoint}")
        return tables

    def describe_table(self, table_name: str) -> List[ColumnDescriptor]:
        """Return the table's columns with their ClickHouse types.

        Raises:
            ValidationError: If the table name is empty or not a plain identifier
            RemoteError: If the store rejects the query
        """
        if not table_name:
            raise ValidationError("Table name is required")
        result = self._query(f"DESCRIBE TABLE {quote_identifier(table_name)}")
        return [
            ColumnDescriptor(name=col["name"], type=col["type"])
            for col in result.named_results()
        ]

    def select_rows(
        self, table_name: str, columns: List[str], limit: Optional[int] = None
    ) -> List[Row]:
        """Read ``columns`` from ``table_name``, optionally limited."""
        if not table_name:
            raise ValidationError("Table name is required")
        if not columns:
            raise ValidationError("No columns selected")

        sql = f"SELECT {column_list(columns)} FROM {quote_identifier(table_name)}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"

        rows = list(self._query(sql).named_results())
        logger.info(f"Read {len(rows)} rows from {table_name}")
        return rows

    def get_schema(self, object_name: Optional[str] = None) -> List[ColumnDescriptor]:
        return self.describe_table(object_name or "")

    def read(
        self,
        columns: List[str],
        object_name: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        rows = self.select_rows(object_name or "", columns, limit)
        return list(project_rows(rows, columns))

    def close(self) -> None:
        self._close_client()
        super().close()
