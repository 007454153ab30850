"""Client-side coordination of one transfer: connect, schema, preview, ingest."""

from dataclasses import replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from flatbridge.config import DEFAULT_BATCH_SIZE, DEFAULT_PREVIEW_LIMIT
from flatbridge.connectors.csv import CSVSource
from flatbridge.core.operations import (
    connect_operation,
    ingest_operation,
    preview_operation,
    schema_operation,
)
from flatbridge.core.storage import UploadStorage
from flatbridge.exceptions import ValidationError
from flatbridge.logging import get_logger
from flatbridge.models import (
    ColumnDescriptor,
    EndpointKind,
    EndpointRole,
    Row,
    TransferResult,
    parse_endpoint_config,
)

logger = get_logger(__name__)


class SessionStage(Enum):
    NEW = auto()
    CONNECTED = auto()
    SCHEMA_LOADED = auto()
    PREVIEWED = auto()
    INGESTED = auto()


def opposite_kind(kind: EndpointKind) -> EndpointKind:
    if kind is EndpointKind.TABULAR_STORE:
        return EndpointKind.DELIMITED_FILE
    return EndpointKind.TABULAR_STORE


class TransferSession:
    """Tracks where a user is in the connect -> schema -> preview -> ingest flow.

    Column selection lives on the ColumnDescriptor ``selected`` flags, in the
    order the user picked them.
    """

    def __init__(
        self,
        storage: UploadStorage,
        source_kind: str,
        source_config: Dict[str, Any],
        destination_config: Optional[Dict[str, Any]] = None,
        destination_kind: Optional[str] = None,
        preview_limit: int = DEFAULT_PREVIEW_LIMIT,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.storage = storage
        self.source_kind = EndpointKind.parse(source_kind)
        self.destination_kind = (
            EndpointKind.parse(destination_kind)
            if destination_kind
            else opposite_kind(self.source_kind)
        )
        self.source_config = dict(source_config or {})
        self.destination_config = dict(destination_config or {})
        self.preview_limit = preview_limit
        self.batch_size = batch_size

        self.stage = SessionStage.NEW
        self.tables: List[str] = []
        self.table_name: Optional[str] = None
        self.columns: List[ColumnDescriptor] = []
        self._selection: List[str] = []

    def _require(self, *stages: SessionStage) -> None:
        if self.stage not in stages:
            expected = " or ".join(stage.name for stage in stages)
            raise ValidationError(
                f"Session is {self.stage.name}; expected {expected} before this step"
            )

    def _advance(self, stage: SessionStage) -> None:
        logger.debug(f"Session {self.stage.name} -> {stage.name}")
        self.stage = stage

    def connect(self) -> List[str]:
        self.tables = connect_operation(self.source_kind.value, self.source_config)
        self._advance(SessionStage.CONNECTED)
        return self.tables

    def load_schema(self, table_name: Optional[str] = None) -> List[ColumnDescriptor]:
        self._require(
            SessionStage.CONNECTED, SessionStage.SCHEMA_LOADED, SessionStage.PREVIEWED
        )
        if self.source_kind is EndpointKind.TABULAR_STORE:
            self.columns = schema_operation(
                self.source_kind.value, self.source_config, table_name
            )
        else:
            config = parse_endpoint_config(
                self.source_kind, EndpointRole.SOURCE, self.source_config
            )
            config = replace(config, file_path=self.storage.resolve(config.file_path))
            self.columns = CSVSource(config).get_schema()

        self.table_name = table_name
        self._selection = []
        self._advance(SessionStage.SCHEMA_LOADED)
        return self.columns

    def select(self, names: List[str]) -> List[str]:
        """Select ``names`` (in order) from the loaded schema."""
        self._require(SessionStage.SCHEMA_LOADED, SessionStage.PREVIEWED)
        known = {column.name: column for column in self.columns}
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ValidationError(f"Unknown columns: {', '.join(unknown)}")

        for column in self.columns:
            column.selected = column.name in names
        self._selection = list(dict.fromkeys(names))
        self._advance(SessionStage.SCHEMA_LOADED)
        return self.selected_columns

    def select_all(self) -> List[str]:
        return self.select([column.name for column in self.columns])

    @property
    def selected_columns(self) -> List[str]:
        return list(self._selection)

    def preview(self) -> List[Row]:
        self._require(SessionStage.SCHEMA_LOADED, SessionStage.PREVIEWED)
        rows = preview_operation(
            self.storage,
            self.source_kind.value,
            self.source_config,
            self.table_name,
            self.selected_columns,
            limit=self.preview_limit,
        )
        self._advance(SessionStage.PREVIEWED)
        return rows

    def ingest(self) -> TransferResult:
        self._require(SessionStage.SCHEMA_LOADED, SessionStage.PREVIEWED)
        payload = {
            "source": self.source_kind.value,
            "target": self.destination_kind.value,
            "sourceConfig": self.source_config,
            "targetConfig": self.destination_config,
            "table": self.table_name,
            "columns": self.selected_columns,
        }
        result = ingest_operation(self.storage, payload, batch_size=self.batch_size)
        self._advance(SessionStage.INGESTED)
        return result
