import csv
import os
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from flatbridge.connectors.base.connector import SourceConnector
from flatbridge.core.projection import project_rows
from flatbridge.exceptions import FormatError, ValidationError
from flatbridge.logging import get_logger
from flatbridge.models import (
    ColumnDescriptor,
    DelimitedFileSourceConfig,
    EndpointKind,
    Row,
)

logger = get_logger(__name__)

DEFAULT_ENCODING = "utf-8"


class CSVSource(SourceConnector):
    """
    Connector for reading rows from delimited text files.

    Every field is read as a string and trimmed; blank lines are skipped and
    never counted as rows. Values missing from short rows come back as None.
    """

    kind = EndpointKind.DELIMITED_FILE
    config_class = DelimitedFileSourceConfig

    def __init__(
        self, config: DelimitedFileSourceConfig, encoding: str = DEFAULT_ENCODING
    ):
        self.encoding = encoding
        super().__init__(config)

    def configure(self, config: DelimitedFileSourceConfig) -> None:
        super().configure(config)
        self.path = config.file_path
        self.delimiter = config.delimiter

    def _read_options(self, nrows: Optional[int]) -> Dict[str, Any]:
        return {
            "sep": self.delimiter,
            "header": 0,
            "index_col": False,
            "dtype": str,
            "keep_default_na": False,
            "skip_blank_lines": True,
            "encoding": self.encoding,
            "nrows": nrows,
        }

    def _record_widths(self, nrows: Optional[int]) -> List[int]:
        """Count the fields of each non-blank data record.

        pandas pads short records, so widths come from a csv.reader pass
        over the same records. Whitespace-only lines are blank to both.

        Raises:
            FormatError: If a record has more fields than the header
        """
        widths: List[int] = []
        header_width = None
        with open(self.path, "r", newline="", encoding=self.encoding) as f:
            reader = csv.reader(f, delimiter=self.delimiter)
            for record in reader:
                if not record or (len(record) == 1 and not record[0].strip()):
                    continue
                if header_width is None:
                    header_width = len(record)
                    continue
                if len(record) > header_width:
                    raise FormatError(
                        f"Row {len(widths) + 1} of {os.path.basename(self.path)} has "
                        f"{len(record)} fields, expected at most {header_width}"
                    )
                widths.append(len(record))
                if nrows is not None and len(widths) >= nrows:
                    break
        return widths

    def _read_frame(self, nrows: Optional[int] = None) -> Tuple[pd.DataFrame, List[int]]:
        """Read the file into a string-typed DataFrame.

        Returns:
            Tuple of (DataFrame, field count of each data row)

        Raises:
            ValidationError: If the file does not exist
            FormatError: If the file cannot be parsed
            pd.errors.EmptyDataError: If the file has no header at all
        """
        if not os.path.exists(self.path):
            raise ValidationError(f"Source file not found: {self.path}")

        try:
            widths = self._record_widths(nrows)
            df = pd.read_csv(self.path, **self._read_options(nrows))
        except (pd.errors.ParserError, csv.Error, UnicodeDecodeError) as e:
            raise FormatError(f"Could not parse {os.path.basename(self.path)}: {e}") from e

        if len(widths) != len(df):
            raise FormatError(
                f"Could not parse {os.path.basename(self.path)}: "
                f"found {len(widths)} records but parsed {len(df)} rows"
            )

        df.columns = [str(name).strip() for name in df.columns]
        for name in df.columns:
            df[name] = df[name].str.strip()

        logger.debug(f"Read {len(df)} rows from {self.path}")
        return df, widths

    @staticmethod
    def _to_rows(df: pd.DataFrame, widths: List[int]) -> List[Row]:
        """Convert to row dicts; fields a short record never had become None."""
        columns = list(df.columns)
        rows = []
        for values, width in zip(df.itertuples(index=False, name=None), widths):
            rows.append(
                {
                    name: value if position < width and not pd.isna(value) else None
                    for position, (name, value) in enumerate(zip(columns, values))
                }
            )
        return rows

    def discover_columns(self) -> List[str]:
        """Return the header names, requiring at least one data row.

        Only the header and the first data row are parsed.

        Raises:
            FormatError: If the file is empty or has no data rows
        """
        try:
            df, _ = self._read_frame(nrows=1)
        except pd.errors.EmptyDataError as e:
            raise FormatError("File is empty or has no valid data") from e

        if df.empty:
            raise FormatError("File is empty or has no valid data")

        return list(df.columns)

    def sample_rows(self, max_rows: int) -> List[Row]:
        """Return up to ``max_rows`` data rows."""
        if max_rows <= 0:
            return []
        try:
            df, widths = self._read_frame(nrows=max_rows)
        except pd.errors.EmptyDataError:
            return []
        return self._to_rows(df, widths)

    def read_rows(self) -> List[Row]:
        """Return every data row in the file.

        A completely empty file yields no rows rather than an error.
        """
        try:
            df, widths = self._read_frame()
        except pd.errors.EmptyDataError:
            logger.info(f"Source file {self.path} is empty")
            return []
        return self._to_rows(df, widths)

    def get_schema(self, object_name: Optional[str] = None) -> List[ColumnDescriptor]:
        return [ColumnDescriptor(name=name) for name in self.discover_columns()]

    def read(
        self,
        columns: List[str],
        object_name: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        rows = self.read_rows() if limit is None else self.sample_rows(limit)
        return list(project_rows(rows, columns))
