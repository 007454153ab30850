"""Ingestion pipeline: moves projected rows from one endpoint to another.

Two directions are supported, ClickHouse -> file and file -> ClickHouse.
Reads always complete before any write starts. Writes to ClickHouse are
split into fixed-size batches inserted strictly in order; a failing batch
aborts the transfer and nothing already inserted is rolled back.
"""

import os
from dataclasses import replace
from enum import Enum, auto
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

from flatbridge.config import DEFAULT_BATCH_SIZE
from flatbridge.connectors import destination_registry, source_registry
from flatbridge.core.storage import UploadStorage, timestamp_ms
from flatbridge.exceptions import (
    FlatBridgeError,
    PartialTransferError,
    UnsupportedDirectionError,
    ValidationError,
)
from flatbridge.logging import get_logger
from flatbridge.models import (
    EndpointKind,
    Row,
    TransferRequest,
    TransferResult,
    validate_selected_columns,
)

logger = get_logger(__name__)


class PipelineState(Enum):
    """State of one transfer."""

    IDLE = auto()
    READING = auto()
    WRITING = auto()
    DONE = auto()
    FAILED = auto()


def chunked(rows: List[Row], size: int) -> Iterator[List[Row]]:
    """Yield consecutive slices of ``rows`` holding at most ``size`` rows."""
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


class IngestionPipeline:
    """Runs a single TransferRequest to completion or failure."""

    def __init__(self, storage: UploadStorage, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        self.storage = storage
        self.batch_size = batch_size
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    @property
    def directions(
        self,
    ) -> Dict[Tuple[EndpointKind, EndpointKind], Callable[..., TransferResult]]:
        return {
            (EndpointKind.TABULAR_STORE, EndpointKind.DELIMITED_FILE): self._store_to_file,
            (EndpointKind.DELIMITED_FILE, EndpointKind.TABULAR_STORE): self._file_to_store,
        }

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state {self.state.name} -> {state.name}")
        self.state = state
        self.history.append(state)

    def run(self, request: TransferRequest) -> TransferResult:
        """Execute ``request``.

        Raises:
            ValidationError: If the column selection is empty or repeats a name
            UnsupportedDirectionError: If the kind pairing is not supported
            PartialTransferError: If a batch fails after others were inserted
            FlatBridgeError: Any other adapter failure
        """
        if self.state is not PipelineState.IDLE:
            raise ValidationError("A pipeline instance runs a single transfer")

        columns = validate_selected_columns(request.selected_columns)
        handler = self.directions.get((request.source_kind, request.destination_kind))
        if handler is None:
            raise UnsupportedDirectionError(
                request.source_kind.value, request.destination_kind.value
            )

        logger.info(
            f"Starting transfer {request.source_kind.value} -> "
            f"{request.destination_kind.value} with {len(columns)} columns"
        )
        try:
            result = handler(request, columns)
        except Exception:
            if self.state in (PipelineState.READING, PipelineState.WRITING):
                self._transition(PipelineState.FAILED)
            raise

        self._transition(PipelineState.DONE)
        logger.info(
            f"Transfer complete: {result.records_processed} records -> {result.destination}"
        )
        return result

    def _store_to_file(self, request: TransferRequest, columns: List[str]) -> TransferResult:
        table_name = request.table_name
        if not table_name:
            raise ValidationError("Table name is required")

        self._transition(PipelineState.READING)
        with source_registry.get(request.source_kind)(request.source_config) as source:
            rows = source.read(columns, table_name)

        output_path = self.storage.export_path(
            request.destination_config.file_name, table_name
        )
        self._transition(PipelineState.WRITING)
        with destination_registry.get(request.destination_kind)(
            request.destination_config, path=output_path
        ) as destination:
            destination.prepare(columns)
            count = destination.write(columns, rows)

        return TransferResult(records_processed=count, destination=os.path.basename(output_path))

    def _read_uploaded_file(self, request: TransferRequest, columns: List[str]) -> List[Row]:
        source_path = self.storage.resolve(request.source_config.file_path)
        config = replace(request.source_config, file_path=source_path)
        try:
            with source_registry.get(request.source_kind)(config) as source:
                return source.read(columns)
        except Exception as e:
            # Files placed in the storage root by hand are never removed
            if not isinstance(e, ValidationError) and self.storage.is_upload(source_path):
                self.storage.discard(source_path)
            raise

    def _file_to_store(self, request: TransferRequest, columns: List[str]) -> TransferResult:
        self._transition(PipelineState.READING)
        rows = self._read_uploaded_file(request, columns)

        table_name = (
            request.destination_config.table_name
            or request.table_name
            or f"imported_{timestamp_ms()}"
        )

        self._transition(PipelineState.WRITING)
        with destination_registry.get(request.destination_kind)(
            request.destination_config
        ) as destination:
            destination.prepare(columns, table_name)
            processed = self._insert_batches(destination, columns, rows, table_name)

        return TransferResult(records_processed=processed, destination=table_name)

    def _insert_batches(
        self, destination, columns: List[str], rows: Iterable[Row], table_name: str
    ) -> int:
        processed = 0
        for index, batch in enumerate(chunked(list(rows), self.batch_size), start=1):
            try:
                processed += destination.write(columns, batch, table_name)
            except FlatBridgeError as e:
                logger.error(
                    f"Batch {index} into {table_name} failed after {processed} records: {e}"
                )
                if processed:
                    raise PartialTransferError(e.message, processed, table_name) from e
                raise
            logger.debug(f"Batch {index}: {processed} records written to {table_name}")
        return processed
