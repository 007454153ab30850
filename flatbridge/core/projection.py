"""Column projection over rows."""

from typing import Iterable, Iterator, List

from flatbridge.models import Row


def project(row: Row, selected_columns: List[str]) -> Row:
    """Return a new row holding exactly ``selected_columns``, in that order.

    Names missing from ``row`` map to None so heterogeneous rows never stop a
    transfer. Extra keys in ``row`` are dropped.
    """
    return {name: row.get(name) for name in selected_columns}


def project_rows(rows: Iterable[Row], selected_columns: List[str]) -> Iterator[Row]:
    """Lazily project every row in ``rows``."""
    for row in rows:
        yield project(row, selected_columns)
