import os

import pytest

from flatbridge.core.session import SessionStage, TransferSession, opposite_kind
from flatbridge.exceptions import ValidationError
from flatbridge.models import EndpointKind


def test_opposite_kind():
    assert opposite_kind(EndpointKind.TABULAR_STORE) is EndpointKind.DELIMITED_FILE
    assert opposite_kind(EndpointKind.DELIMITED_FILE) is EndpointKind.TABULAR_STORE


class TestStoreToFileSession:
    @pytest.fixture
    def session(self, storage, store_config, mock_client):
        mock_client.query.return_value.result_rows = [("events",)]
        mock_client.query.return_value.named_results.return_value = [
            {"name": "id", "type": "UInt32"},
            {"name": "name", "type": "String"},
        ]
        return TransferSession(storage, "clickhouse", store_config, preview_limit=10)

    def test_full_flow(self, session, storage, mock_client):
        assert session.destination_kind is EndpointKind.DELIMITED_FILE
        assert session.connect() == ["events"]
        assert [c.name for c in session.load_schema("events")] == ["id", "name"]

        session.select(["name"])
        assert [c.selected for c in session.columns] == [False, True]

        mock_client.query.return_value.named_results.return_value = [
            {"id": 1, "name": "Alice"}
        ]
        assert session.preview() == [{"name": "Alice"}]
        assert session.stage is SessionStage.PREVIEWED
        mock_client.query.assert_called_with("SELECT `name` FROM `events` LIMIT 10")

        result = session.ingest()
        assert result.records_processed == 1
        assert session.stage is SessionStage.INGESTED
        with open(os.path.join(storage.root, result.destination)) as f:
            assert f.read() == "name\nAlice\n"

    def test_steps_must_follow_order(self, session):
        with pytest.raises(ValidationError, match="Session is NEW"):
            session.load_schema("events")
        session.connect()
        with pytest.raises(ValidationError):
            session.preview()
        with pytest.raises(ValidationError):
            session.ingest()

    def test_select_unknown_column(self, session):
        session.connect()
        session.load_schema("events")
        with pytest.raises(ValidationError, match="Unknown columns: missing"):
            session.select(["id", "missing"])

    def test_selection_keeps_pick_order(self, session):
        session.connect()
        session.load_schema("events")
        assert session.select(["name", "id"]) == ["name", "id"]
        assert session.select_all() == ["id", "name"]

    def test_preview_without_selection_fails(self, session):
        session.connect()
        session.load_schema("events")
        with pytest.raises(ValidationError, match="No columns selected"):
            session.preview()

    def test_reloading_schema_clears_selection(self, session):
        session.connect()
        session.load_schema("events")
        session.select(["id"])
        session.load_schema("events")
        assert session.selected_columns == []


class TestFileToStoreSession:
    def test_full_flow(self, storage, sample_csv_file, store_config, mock_client):
        session = TransferSession(
            storage,
            "flatfile",
            {"filePath": sample_csv_file},
            destination_config=dict(store_config, tableName="people"),
            batch_size=2,
        )

        assert session.connect() == []
        assert [c.name for c in session.load_schema()] == ["id", "name", "value"]
        assert all(c.type is None for c in session.columns)
        session.select(["id", "value"])
        assert session.preview()[0] == {"id": "1", "value": "100"}

        result = session.ingest()

        assert result.records_processed == 3
        assert result.destination == "people"
        assert mock_client.insert.call_count == 2

    def test_schema_for_file_outside_storage(self, storage, tmp_path):
        outside = tmp_path / "elsewhere.csv"
        outside.write_text("a\n1\n")
        session = TransferSession(storage, "flatfile", {"filePath": str(outside)})
        session.connect()
        with pytest.raises(ValidationError):
            session.load_schema()
