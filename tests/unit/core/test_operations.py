"""Tests for the operations shared by the API and the CLI."""

import io
import os

import pytest

from flatbridge.core.operations import (
    connect_operation,
    ingest_operation,
    preview_operation,
    schema_operation,
    upload_operation,
)
from flatbridge.exceptions import (
    FormatError,
    StoreConnectionError,
    UnsupportedDirectionError,
    ValidationError,
)


class TestConnect:
    def test_file_source_needs_no_connection(self, mock_client):
        assert connect_operation("flatfile", None) == []
        mock_client.get_client_mock.assert_not_called()

    def test_store_lists_tables(self, store_config, mock_client):
        mock_client.query.return_value.result_rows = [("events",)]

        assert connect_operation("clickhouse", store_config) == ["events"]
        mock_client.close.assert_called_once()

    @pytest.mark.parametrize("missing", ["endpoint", "keyId", "keySecret"])
    def test_missing_credentials(self, store_config, missing, mock_client):
        del store_config[missing]
        with pytest.raises(StoreConnectionError, match="Missing required connection parameters"):
            connect_operation("clickhouse", store_config)
        mock_client.get_client_mock.assert_not_called()

    def test_unknown_kind(self):
        with pytest.raises(ValidationError, match="Invalid endpoint kind"):
            connect_operation("postgres", {})


class TestUpload:
    def test_upload_discovers_columns(self, storage):
        columns, path = upload_operation(storage, io.BytesIO(b"id,name\n1,Alice"), "people.csv")

        assert columns == ["id", "name"]
        assert os.path.exists(path)

    def test_upload_with_delimiter(self, storage):
        columns, _ = upload_operation(storage, io.BytesIO(b"a|b\n1|2\n"), "p.csv", "|")
        assert columns == ["a", "b"]

    @pytest.mark.parametrize("content", [b"", b"id,name\n", b"\n\n"])
    def test_upload_without_data_is_removed(self, storage, content):
        with pytest.raises(FormatError, match="File is empty or has no valid data"):
            upload_operation(storage, io.BytesIO(content), "empty.csv")

        assert os.listdir(storage.root) == []

    def test_upload_rejects_long_delimiter(self, storage):
        with pytest.raises(ValidationError):
            upload_operation(storage, io.BytesIO(b"a\n1\n"), "a.csv", "||")
        assert os.listdir(storage.root) == []


class TestSchema:
    def test_describe(self, store_config, mock_client):
        mock_client.query.return_value.named_results.return_value = [
            {"name": "id", "type": "UInt32"},
            {"name": "name", "type": "String"},
        ]

        columns = schema_operation("clickhouse", store_config, "t")

        assert [c.to_dict() for c in columns] == [
            {"name": "id", "type": "UInt32"},
            {"name": "name", "type": "String"},
        ]

    def test_file_kind_is_rejected(self):
        with pytest.raises(ValidationError, match="Invalid source type"):
            schema_operation("flatfile", {"filePath": "x.csv"}, "t")

    def test_table_required(self, store_config, mock_client):
        with pytest.raises(ValidationError, match="Table name is required"):
            schema_operation("clickhouse", store_config, None)
        mock_client.get_client_mock.assert_not_called()


class TestPreview:
    def test_file_preview_is_projected(self, storage, sample_csv_file):
        rows = preview_operation(
            storage, "flatfile", {"filePath": sample_csv_file}, None, ["name", "id"], limit=2
        )

        assert rows == [{"name": "Alice", "id": "1"}, {"name": "Bob", "id": "2"}]
        assert list(rows[0]) == ["name", "id"]

    def test_file_preview_relative_path(self, storage, sample_csv_file):
        rows = preview_operation(storage, "flatfile", {"filePath": "people.csv"}, None, ["id"])
        assert len(rows) == 3

    def test_missing_column_is_null(self, storage, sample_csv_file):
        rows = preview_operation(
            storage, "flatfile", {"filePath": sample_csv_file}, None, ["id", "nope"], limit=1
        )
        assert rows == [{"id": "1", "nope": None}]

    def test_store_preview_uses_limit(self, storage, store_config, mock_client):
        mock_client.query.return_value.named_results.return_value = [{"id": 1}]

        preview_operation(storage, "clickhouse", store_config, "events", ["id"], limit=100)

        mock_client.query.assert_called_once_with("SELECT `id` FROM `events` LIMIT 100")

    def test_store_preview_requires_table(self, storage, store_config):
        with pytest.raises(ValidationError, match="Table name is required"):
            preview_operation(storage, "clickhouse", store_config, None, ["id"])

    def test_columns_required(self, storage, sample_csv_file):
        with pytest.raises(ValidationError, match="No columns selected"):
            preview_operation(storage, "flatfile", {"filePath": sample_csv_file}, None, [])


class TestIngest:
    def test_file_to_store(self, storage, sample_csv_file, store_config, mock_client):
        payload = {
            "source": "flatfile",
            "target": "clickhouse",
            "sourceConfig": {"filePath": sample_csv_file},
            "targetConfig": dict(store_config, tableName="people"),
            "columns": ["id", "name"],
        }

        result = ingest_operation(storage, payload)

        assert result.records_processed == 3
        assert result.destination == "people"
        mock_client.insert.assert_called_once_with(
            "people",
            [["1", "Alice"], ["2", "Bob"], ["3", "Charlie"]],
            column_names=["id", "name"],
        )

    def test_empty_columns_checked_first(self, storage):
        with pytest.raises(ValidationError, match="No columns selected"):
            ingest_operation(storage, {"source": "bogus", "columns": []})

    def test_same_kind(self, storage, store_config):
        payload = {
            "source": "clickhouse",
            "target": "clickhouse",
            "sourceConfig": store_config,
            "targetConfig": store_config,
            "table": "events",
            "columns": ["id"],
        }
        with pytest.raises(UnsupportedDirectionError):
            ingest_operation(storage, payload)
