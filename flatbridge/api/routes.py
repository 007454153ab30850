from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from flatbridge.api.dependencies import get_settings, get_storage
from flatbridge.api.schemas import (
    ColumnInfo,
    ConnectRequest,
    ConnectResponse,
    ErrorResponse,
    IngestRequest,
    IngestResponse,
    PreviewRequest,
    PreviewResponse,
    SchemaRequest,
    SchemaResponse,
    UploadResponse,
)
from flatbridge.config import Settings
from flatbridge.core.operations import (
    connect_operation,
    ingest_operation,
    preview_operation,
    schema_operation,
    upload_operation,
)
from flatbridge.core.storage import UploadStorage
from flatbridge.exceptions import ValidationError
from flatbridge.logging import get_logger
from flatbridge.models import EndpointKind

logger = get_logger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter(prefix="/api", responses=ERROR_RESPONSES)


@router.post("/connect", response_model=ConnectResponse)
def connect(req: ConnectRequest):
    tables = connect_operation(req.source, req.config)
    return ConnectResponse(tables=tables)


@router.post("/upload", response_model=UploadResponse)
def upload(
    file: Optional[UploadFile] = File(None),
    delimiter: str = Form(","),
    storage: UploadStorage = Depends(get_storage),
):
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    columns, path = upload_operation(storage, file.file, file.filename, delimiter)
    return UploadResponse(columns=columns, filePath=path)


@router.post("/schema", response_model=SchemaResponse)
def schema(req: SchemaRequest):
    columns = schema_operation(req.source, req.config, req.table)
    return SchemaResponse(columns=[ColumnInfo(**column.to_dict()) for column in columns])


@router.post("/preview", response_model=PreviewResponse)
def preview(
    req: PreviewRequest,
    storage: UploadStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    rows = preview_operation(
        storage,
        req.source,
        req.config,
        req.table,
        req.columns,
        limit=settings.preview_limit,
    )
    return PreviewResponse(rows=rows)


@router.post(
    "/ingest", response_model=IngestResponse, response_model_exclude_none=True
)
def ingest(
    req: IngestRequest,
    storage: UploadStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    result = ingest_operation(
        storage, req.model_dump(by_alias=True), batch_size=settings.batch_size
    )

    if EndpointKind.parse(req.target) is EndpointKind.DELIMITED_FILE:
        return IngestResponse(
            recordsProcessed=result.records_processed, outputFile=result.destination
        )
    return IngestResponse(
        recordsProcessed=result.records_processed, tableName=result.destination
    )
