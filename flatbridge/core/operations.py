"""Operations behind the HTTP routes and the CLI.

Each function takes wire-level input (endpoint kind names and camelCase config
dicts), builds the typed config, and talks to one adapter.
"""

from dataclasses import replace
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

from flatbridge.config import DEFAULT_BATCH_SIZE, DEFAULT_PREVIEW_LIMIT
from flatbridge.connectors import source_registry
from flatbridge.connectors.csv import CSVSource
from flatbridge.core.pipeline import IngestionPipeline
from flatbridge.core.storage import UploadStorage
from flatbridge.exceptions import ValidationError
from flatbridge.logging import get_logger
from flatbridge.models import (
    ColumnDescriptor,
    DelimitedFileSourceConfig,
    EndpointKind,
    EndpointRole,
    Row,
    TransferRequest,
    TransferResult,
    parse_endpoint_config,
    validate_selected_columns,
)

logger = get_logger(__name__)


def connect_operation(kind: str, raw_config: Optional[Dict[str, Any]]) -> List[str]:
    """Validate a source and list its tables.

    File sources succeed trivially; their upload happens separately.
    """
    kind = EndpointKind.parse(kind)
    if kind is EndpointKind.DELIMITED_FILE:
        return []

    config = parse_endpoint_config(kind, EndpointRole.SOURCE, raw_config)
    with source_registry.get(kind)(config) as source:
        return source.list_tables()


def upload_operation(
    storage: UploadStorage,
    stream: BinaryIO,
    file_name: str,
    delimiter: Optional[str] = None,
) -> Tuple[List[str], str]:
    """Store an uploaded file and discover its columns.

    The stored file is removed again if discovery fails.

    Returns:
        Tuple of (column names, stored file path)
    """
    config = parse_endpoint_config(
        EndpointKind.DELIMITED_FILE,
        EndpointRole.SOURCE,
        {"filePath": file_name, "delimiter": delimiter},
    )
    path = storage.save_upload(stream, file_name)
    try:
        columns = CSVSource(replace(config, file_path=path)).discover_columns()
    except Exception:
        storage.discard(path)
        raise

    logger.info(f"Discovered {len(columns)} columns in {file_name}")
    return columns, path


def schema_operation(
    kind: str, raw_config: Optional[Dict[str, Any]], table_name: Optional[str]
) -> List[ColumnDescriptor]:
    """Describe a ClickHouse table."""
    kind = EndpointKind.parse(kind)
    if kind is not EndpointKind.TABULAR_STORE:
        raise ValidationError("Invalid source type or missing configuration")
    if not table_name:
        raise ValidationError("Table name is required")

    config = parse_endpoint_config(kind, EndpointRole.SOURCE, raw_config)
    with source_registry.get(kind)(config) as source:
        return source.describe_table(table_name)


def preview_operation(
    storage: UploadStorage,
    kind: str,
    raw_config: Optional[Dict[str, Any]],
    table_name: Optional[str],
    columns: Optional[List[str]],
    limit: int = DEFAULT_PREVIEW_LIMIT,
) -> List[Row]:
    """Return up to ``limit`` rows projected to ``columns``."""
    columns = validate_selected_columns(columns)
    kind = EndpointKind.parse(kind)
    config = parse_endpoint_config(kind, EndpointRole.SOURCE, raw_config)

    if isinstance(config, DelimitedFileSourceConfig):
        config = replace(config, file_path=storage.resolve(config.file_path))
    elif not table_name:
        raise ValidationError("Table name is required")

    with source_registry.get(kind)(config) as source:
        return source.read(columns, table_name, limit=limit)


def ingest_operation(
    storage: UploadStorage,
    payload: Dict[str, Any],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> TransferResult:
    """Run a full transfer described by an ingest payload."""
    validate_selected_columns(payload.get("columns"))
    request = TransferRequest.from_dict(payload)
    return IngestionPipeline(storage, batch_size=batch_size).run(request)
