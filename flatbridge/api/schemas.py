from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectRequest(BaseModel):
    source: str
    config: Dict[str, Any] = Field(default_factory=dict)


class ConnectResponse(BaseModel):
    success: bool = True
    tables: List[str] = Field(default_factory=list)


class UploadResponse(BaseModel):
    success: bool = True
    columns: List[str]
    filePath: str


class SchemaRequest(BaseModel):
    source: str
    config: Dict[str, Any] = Field(default_factory=dict)
    table: Optional[str] = None


class ColumnInfo(BaseModel):
    name: str
    type: Optional[str] = None


class SchemaResponse(BaseModel):
    success: bool = True
    columns: List[ColumnInfo]


class PreviewRequest(BaseModel):
    source: str
    config: Dict[str, Any] = Field(default_factory=dict)
    table: Optional[str] = None
    columns: List[str] = Field(default_factory=list)


class PreviewResponse(BaseModel):
    success: bool = True
    rows: List[Dict[str, Any]]


class IngestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    target: str
    source_config: Dict[str, Any] = Field(default_factory=dict, alias="sourceConfig")
    target_config: Dict[str, Any] = Field(default_factory=dict, alias="targetConfig")
    table: Optional[str] = None
    columns: List[str] = Field(default_factory=list)


class IngestResponse(BaseModel):
    success: bool = True
    recordsProcessed: int
    outputFile: Optional[str] = None
    tableName: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
