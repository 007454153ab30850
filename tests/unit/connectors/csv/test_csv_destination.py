import os
import tempfile
import unittest

from flatbridge.connectors.csv import CSVDestination, CSVSource
from flatbridge.models import DelimitedFileDestinationConfig, DelimitedFileSourceConfig


class TestCSVDestination(unittest.TestCase):
    """Test the CSVDestination connector."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp_dir.name, "out.csv")
        self.columns = ["id", "name", "value"]
        self.rows = [
            {"id": "1", "name": "Alice", "value": "100"},
            {"id": "2", "name": "Bob", "value": "200"},
        ]

    def tearDown(self):
        self.tmp_dir.cleanup()

    def _destination(self, delimiter=","):
        return CSVDestination(
            DelimitedFileDestinationConfig(delimiter=delimiter), path=self.path
        )

    def _read_back(self, delimiter=","):
        return CSVSource(
            DelimitedFileSourceConfig(file_path=self.path, delimiter=delimiter)
        ).read_rows()

    def test_write_success(self):
        """Test successful write to a CSV file."""
        count = self._destination().write_rows(self.columns, self.rows)

        self.assertEqual(count, 2)
        with open(self.path) as f:
            self.assertEqual(f.read(), "id,name,value\n1,Alice,100\n2,Bob,200\n")

    def test_write_uses_column_order(self):
        count = self._destination().write_rows(["value", "id"], self.rows)

        self.assertEqual(count, 2)
        with open(self.path) as f:
            self.assertEqual(f.readline().strip(), "value,id")

    def test_write_with_custom_delimiter(self):
        self._destination("|").write_rows(self.columns, self.rows)

        with open(self.path) as f:
            self.assertEqual(f.readline().strip(), "id|name|value")

    def test_write_truncates_existing_file(self):
        with open(self.path, "w") as f:
            f.write("old,content\n" * 100)

        self._destination().write_rows(self.columns, self.rows[:1])

        self.assertEqual(self._read_back(), self.rows[:1])

    def test_write_empty_rows_writes_header(self):
        count = self._destination().write_rows(self.columns, [])

        self.assertEqual(count, 0)
        with open(self.path) as f:
            self.assertEqual(f.read(), "id,name,value\n")

    def test_write_accepts_generator_and_nulls(self):
        rows = (row for row in [{"id": 1, "name": None, "value": 2.5}])
        self._destination().write_rows(self.columns, rows)

        with open(self.path) as f:
            self.assertEqual(f.read().splitlines()[1], "1,,2.5")

    def test_nullable_integers_keep_their_form(self):
        rows = [{"id": 1, "score": 10}, {"id": 2, "score": None}, {"id": 3}]
        self._destination().write_rows(["id", "score"], rows)

        with open(self.path) as f:
            self.assertEqual(f.read(), "id,score\n1,10\n2,\n3,\n")

    def test_round_trip_with_delimiters_quotes_and_newlines(self):
        rows = [
            {"id": "1", "name": "Smith, John", "value": 'says "hi"'},
            {"id": "2", "name": "line one\nline two", "value": "a;b"},
        ]
        self._destination().write_rows(self.columns, rows)

        self.assertEqual(self._read_back(), rows)

    def test_round_trip_with_semicolon_delimiter(self):
        rows = [{"id": "1", "name": "x;y", "value": "plain"}]
        self._destination(";").write_rows(self.columns, rows)

        self.assertEqual(self._read_back(";"), rows)

    def test_no_temporary_files_left_behind(self):
        self._destination().write_rows(self.columns, self.rows)

        self.assertEqual(os.listdir(self.tmp_dir.name), ["out.csv"])

    def test_missing_path(self):
        """Test that an error is raised if no path is given."""
        with self.assertRaises(ValueError) as context:
            CSVDestination(DelimitedFileDestinationConfig(), path="")

        self.assertIn("path", str(context.exception))
