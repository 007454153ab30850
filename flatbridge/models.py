"""Data model shared by the connectors, the pipeline and the API."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from flatbridge.exceptions import StoreConnectionError, ValidationError

Row = Dict[str, Any]

DEFAULT_DELIMITER = ","


class EndpointKind(Enum):
    """Kind of endpoint; values are the wire names."""

    TABULAR_STORE = "clickhouse"
    DELIMITED_FILE = "flatfile"

    @classmethod
    def parse(cls, value: Union[str, "EndpointKind"]) -> "EndpointKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ValidationError(
                f"Invalid endpoint kind {value!r}; expected one of: {valid}"
            )


class EndpointRole(Enum):
    SOURCE = "source"
    DESTINATION = "destination"


@dataclass(frozen=True)
class TabularStoreConfig:
    endpoint: str
    key_id: str
    key_secret: str
    database: Optional[str] = None
    table_name: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"TabularStoreConfig(endpoint={self.endpoint!r}, key_id={self.key_id!r}, "
            f"key_secret='***', database={self.database!r})"
        )


@dataclass(frozen=True)
class DelimitedFileSourceConfig:
    file_path: str
    delimiter: str = DEFAULT_DELIMITER


@dataclass(frozen=True)
class DelimitedFileDestinationConfig:
    file_name: Optional[str] = None
    delimiter: str = DEFAULT_DELIMITER


ConnectionConfig = Union[
    TabularStoreConfig, DelimitedFileSourceConfig, DelimitedFileDestinationConfig
]


def _parse_delimiter(raw: Dict[str, Any]) -> str:
    delimiter = raw.get("delimiter") or DEFAULT_DELIMITER
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ValidationError(
            f"Field delimiter must be a single character, got {delimiter!r}"
        )
    return delimiter


def _parse_store_config(raw: Dict[str, Any]) -> TabularStoreConfig:
    endpoint = raw.get("endpoint")
    key_id = raw.get("keyId")
    key_secret = raw.get("keySecret")
    if not endpoint or not key_id or not key_secret:
        raise StoreConnectionError("Missing required connection parameters")
    return TabularStoreConfig(
        endpoint=endpoint,
        key_id=key_id,
        key_secret=key_secret,
        database=raw.get("database") or None,
        table_name=raw.get("tableName") or None,
    )


def parse_endpoint_config(
    kind: Union[str, EndpointKind],
    role: EndpointRole,
    raw: Optional[Dict[str, Any]],
) -> ConnectionConfig:
    """Build the config variant for an endpoint kind and role.

    Args:
        kind: Endpoint kind or its wire name
        role: Whether the endpoint is read from or written to
        raw: Wire dictionary (camelCase keys)

    Returns:
        One of TabularStoreConfig, DelimitedFileSourceConfig,
        DelimitedFileDestinationConfig

    Raises:
        StoreConnectionError: If a store credential is missing
        ValidationError: If a file field is missing or malformed
    """
    kind = EndpointKind.parse(kind)
    raw = raw or {}

    if kind is EndpointKind.TABULAR_STORE:
        return _parse_store_config(raw)

    if kind is EndpointKind.DELIMITED_FILE:
        if role is EndpointRole.SOURCE:
            file_path = raw.get("filePath")
            if not file_path:
                raise ValidationError("Source file path is missing")
            return DelimitedFileSourceConfig(
                file_path=file_path, delimiter=_parse_delimiter(raw)
            )
        return DelimitedFileDestinationConfig(
            file_name=raw.get("fileName") or None, delimiter=_parse_delimiter(raw)
        )

    raise ValidationError(f"Unhandled endpoint kind: {kind}")


@dataclass
class ColumnDescriptor:
    name: str
    type: Optional[str] = None
    selected: bool = False

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "type": self.type}


def validate_selected_columns(columns: Optional[List[str]]) -> List[str]:
    """Check the selection is non-empty and duplicate-free.

    Raises:
        ValidationError: If the selection is empty or repeats a name
    """
    if not columns:
        raise ValidationError("No columns selected")

    seen = set()
    duplicates = []
    for name in columns:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise ValidationError(f"Duplicate columns selected: {', '.join(duplicates)}")

    return list(columns)


@dataclass
class TransferRequest:
    source_kind: EndpointKind
    destination_kind: EndpointKind
    source_config: ConnectionConfig
    destination_config: ConnectionConfig
    selected_columns: List[str] = field(default_factory=list)
    table_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferRequest":
        """Create a TransferRequest from wire or job-file keys.

        Accepts both the HTTP names (sourceConfig/targetConfig) and the
        snake_case names used by job files.
        """
        source_kind = EndpointKind.parse(data.get("source"))
        destination_kind = EndpointKind.parse(data.get("target"))
        source_raw = data.get("sourceConfig", data.get("source_config"))
        destination_raw = data.get("targetConfig", data.get("target_config"))
        return cls(
            source_kind=source_kind,
            destination_kind=destination_kind,
            source_config=parse_endpoint_config(
                source_kind, EndpointRole.SOURCE, source_raw
            ),
            destination_config=parse_endpoint_config(
                destination_kind, EndpointRole.DESTINATION, destination_raw
            ),
            selected_columns=list(data.get("columns") or []),
            table_name=data.get("table") or None,
        )


@dataclass(frozen=True)
class TransferResult:
    records_processed: int
    destination: str
