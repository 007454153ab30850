import csv
import os
import uuid
from typing import Iterable, List, Optional

import pandas as pd

from flatbridge.connectors.base.connector import DestinationConnector
from flatbridge.logging import get_logger
from flatbridge.models import DelimitedFileDestinationConfig, EndpointKind, Row

logger = get_logger(__name__)


class CSVDestination(DestinationConnector):
    """
    Connector for writing rows to a delimited file using a "stage-and-swap" pattern.
    """

    kind = EndpointKind.DELIMITED_FILE
    config_class = DelimitedFileDestinationConfig

    def __init__(
        self,
        config: DelimitedFileDestinationConfig,
        path: str,
        encoding: str = "utf-8",
    ):
        if not path:
            raise ValueError("CSVDestination: 'path' not specified")
        self.path = path
        self.encoding = encoding
        super().__init__(config)

    def configure(self, config: DelimitedFileDestinationConfig) -> None:
        super().configure(config)
        self.delimiter = config.delimiter

    def _create_temp_path(self) -> str:
        """Create a temporary file path in the same directory as the target."""
        dir_path = os.path.dirname(self.path)
        base_name = os.path.basename(self.path)
        return os.path.join(dir_path, f".tmp_{uuid.uuid4().hex[:8]}_{base_name}")

    def write_rows(self, columns: List[str], rows: Iterable[Row]) -> int:
        """Write a header and one line per row, replacing any existing file.

        Fields containing the delimiter, quotes or newlines are quoted. The
        count is returned only after the file is closed and swapped in.
        """
        df = pd.DataFrame(list(rows), columns=columns, dtype=object)

        dir_path = os.path.dirname(self.path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        temp_path = self._create_temp_path()
        try:
            df.to_csv(
                temp_path,
                sep=self.delimiter,
                index=False,
                header=True,
                na_rep="",
                quoting=csv.QUOTE_MINIMAL,
                lineterminator="\n",
                encoding=self.encoding,
            )
            os.replace(temp_path, self.path)
        except Exception:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    logger.warning("Failed to cleanup temporary file: %s", temp_path)
            raise

        logger.info("Wrote %d rows to %s", len(df), self.path)
        return len(df)

    def write(
        self, columns: List[str], rows: Iterable[Row], object_name: Optional[str] = None
    ) -> int:
        return self.write_rows(columns, rows)
