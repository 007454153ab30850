"""Pytest configuration for flatbridge tests."""

from typing import Any, Dict, Generator
from unittest.mock import MagicMock, patch

import pytest

from flatbridge.core.storage import UploadStorage


@pytest.fixture
def storage(tmp_path) -> UploadStorage:
    """Return an UploadStorage rooted in a temporary directory."""
    return UploadStorage(str(tmp_path / "uploads"))


@pytest.fixture
def sample_csv_data() -> str:
    """Return sample CSV data for testing.

    Returns
    -------
        Sample CSV data as string

    """
    return "id,name,value\n1,Alice,100\n2,Bob,200\n3,Charlie,300\n"


@pytest.fixture
def sample_csv_file(storage, sample_csv_data) -> str:
    """Write the sample CSV into the storage root and return its path."""
    path = f"{storage.root}/people.csv"
    with open(path, "w") as f:
        f.write(sample_csv_data)
    return path


@pytest.fixture
def store_config() -> Dict[str, Any]:
    """Wire-format ClickHouse configuration."""
    return {
        "endpoint": "https://ch.example.com:8443",
        "keyId": "default",
        "keySecret": "secret",
    }


@pytest.fixture
def mock_client() -> Generator[MagicMock, None, None]:
    """Patch clickhouse_connect.get_client and yield the client it returns."""
    client = MagicMock()
    with patch("clickhouse_connect.get_client", return_value=client) as get_client:
        client.get_client_mock = get_client
        yield client
