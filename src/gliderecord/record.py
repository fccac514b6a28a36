"""
GlideRecord: a cursor over rows of a ServiceNow table.

Mirrors the server-side GlideRecord API closely enough for external scripts:
build an encoded query, run it, walk the result set, change fields and push
them back with update(), or create/delete records.

    access = GlideAccess("dev12345.service-now.com", "admin", "secret")
    incident = GlideRecord("incident", access)
    incident.add_encoded_query("active=true")
    incident.order_by("sys_updated_on")
    incident.set_limit(5)
    incident.query()
    for row in incident:
        row.set_value("short_description", "Changed for " + row.get_value("number"))
        row.update()

Rows are plain dicts. Every row carries a list of the fields changed since the
last successful update(); only those fields are sent to the server.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Union
from urllib.parse import quote_plus

from .access import GlideAccess, Row
from .exceptions import PreconditionError, QueryError, ValidationError
from .util import is_valid_column, is_valid_sys_id, is_valid_table, join_encoded_query

_logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class GlideRow:
    """A view of one buffered row, addressed by its index in the owning record.

    Reads and writes go straight to the record's buffer; nothing is copied.
    Each operation moves the record's cursor to this row first, so update()
    and delete_record() act on the row the view points at.
    """

    __slots__ = ("_record", "_index")

    def __init__(self, record: GlideRecord, index: int) -> None:
        self._record = record
        self._index = index

    @property
    def index(self) -> int:
        return self._index

    @property
    def record(self) -> GlideRecord:
        return self._record

    def _focus(self) -> GlideRecord:
        self._record._seek(self._index)
        return self._record

    def get_value(self, field: str) -> Any:
        return self._focus().get_value(field)

    def set_value(self, field: str, value: Any) -> None:
        self._focus().set_value(field, value)

    def is_modified(self, field: Optional[str] = None) -> bool:
        return self._focus().is_modified(field)

    def update(self) -> bool:
        return self._focus().update()

    def delete_record(self) -> bool:
        return self._focus().delete_record()

    def as_dict(self) -> Row:
        return dict(self._focus().get_data()[self._index])

    def __repr__(self) -> str:
        rows = self._record.get_data()
        sys_id = rows[self._index].get("sys_id") if self._index < len(rows) else None
        return f"<GlideRow {self._record.table_name}[{self._index}] sys_id={sys_id!r}>"


class GlideRecord:
    """Query, update, insert and delete records of one table."""

    def __init__(self, table_name: str, access: Optional[GlideAccess] = None) -> None:
        # Fall back to the shared accessor set up by GlideAccess.init()
        self._access = access if access is not None else GlideAccess.get_instance()

        if not is_valid_table(table_name):
            raise ValidationError(f"Invalid table name {table_name!r}")
        self._table_name = table_name

        self._queries: List[str] = []
        self._limit: Optional[int] = None
        self._rows: List[Row] = []
        self._modified: List[List[str]] = []
        self._position = 0
        self.initialize()

    # --------------------------- State --------------------------------

    def initialize(self) -> None:
        """Reset to a clean slate: no clauses, no limit, one blank row."""
        self._queries = []
        self._limit = None
        self._rows = [{}]
        self._modified = [[]]
        self._position = 0

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def access(self) -> GlideAccess:
        return self._access

    @property
    def position(self) -> int:
        return self._position

    @property
    def limit(self) -> Optional[int]:
        return self._limit

    def get_data(self) -> List[Row]:
        """Return the row buffer itself (mostly for debugging)."""
        return self._rows

    def get_row_count(self) -> int:
        return len(self._rows)

    # --------------------------- Fields -------------------------------

    def get_value(self, field: str) -> Any:
        """Value of a field on the current row, or None if unset."""
        if not self.valid():
            return None
        return self._rows[self._position].get(field)

    def set_value(self, field: str, value: Any) -> None:
        """Set a field on the current row and remember it for update()."""
        if not isinstance(field, str) or not field:
            raise ValidationError(f"Invalid field name {field!r}")
        pos = self._current_index()
        self._rows[pos][field] = value
        if field not in self._modified[pos]:
            self._modified[pos].append(field)

    @property
    def modified_fields(self) -> List[str]:
        if not self.valid():
            return []
        return list(self._modified[self._position])

    def is_modified(self, field: Optional[str] = None) -> bool:
        mods = self.modified_fields
        return bool(mods) if field is None else field in mods

    # --------------------------- Query building -----------------------

    def add_encoded_query(self, query: str) -> None:
        self._queries.append(query)

    def order_by(self, column: str) -> None:
        """Order by a column, ascending (A-Z)."""
        if not is_valid_column(column):
            raise ValidationError(f"Invalid column name to order by: {column!r}")
        self._queries.append(f"ORDERBY{column}")

    def order_by_desc(self, column: str) -> None:
        """Order by a column, descending (Z-A)."""
        if not is_valid_column(column):
            raise ValidationError(f"Invalid column name to order by: {column!r}")
        self._queries.append(f"ORDERBYDESC{column}")

    def set_limit(self, limit: int) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValidationError(f"Invalid limit {limit!r}")
        self._limit = limit

    def get_encoded_query(self) -> str:
        return join_encoded_query(self._queries)

    # --------------------------- Remote operations --------------------

    def query(self) -> bool:
        """Run the pending clauses and load the matching rows into the buffer.

        Returns True if at least one row came back. On a 404 the buffer is
        left as it was.
        """
        if not self._queries:
            raise QueryError("No queries have been added to this GlideRecord")

        url = f"table/{self._table_name}?sysparm_query={quote_plus(self.get_encoded_query())}"
        if self._limit is not None:
            url += f"&sysparm_limit={self._limit}"

        result = self._access.get(url)
        if result is False:
            _logger.debug("Query on %s found nothing (404)", self._table_name)
            return False

        self._rows = list(result)
        self._modified = [[] for _ in self._rows]
        self._position = 0
        _logger.info("Query on %s returned %d row(s)", self._table_name, len(self._rows))
        return len(self._rows) > 0

    def get(self, sys_id_or_field: str, value: Any = None) -> bool:
        """Fetch one record by sys_id, or by ``field=value`` when value is given."""
        if value is None:
            return self.get_by_sys_id(sys_id_or_field)
        return self.get_by_field(sys_id_or_field, value)

    def get_by_sys_id(self, sys_id: str) -> bool:
        self.initialize()
        self._queries.append(f"sys_id={sys_id}")
        return self.query()

    def get_by_field(self, field: str, value: Any) -> bool:
        if not is_valid_column(field):
            raise ValidationError(f"Invalid column name: {field!r}")
        self.initialize()
        self._queries.append(f"{field}={_format_value(value)}")
        return self.query()

    def update(self) -> bool:
        """Send the changed fields of the current row to the server.

        A row with no pending changes is a no-op that returns True.
        """
        pos = self._current_index()
        mods = self._modified[pos]
        if not mods:
            return True

        sys_id = self._rows[pos].get("sys_id")
        if not is_valid_sys_id(sys_id):
            raise PreconditionError(
                f"Cannot update this record (sys_id {sys_id!r} - is it a valid record?)"
            )

        changes = {f: self._rows[pos].get(f) for f in mods}
        if not self._access.put(f"table/{self._table_name}/{sys_id}", changes):
            _logger.warning("Update of %s/%s: record not found", self._table_name, sys_id)
            return False

        self._modified[pos] = []
        return True

    def delete_record(self) -> bool:
        """Delete the current record on the server and drop it from the buffer."""
        sys_id = self.get_value("sys_id")
        if not is_valid_sys_id(sys_id):
            raise ValidationError(
                f"Cannot delete this record (sys_id {sys_id!r} - is it a valid record?)"
            )

        deleted = self._access.delete(f"table/{self._table_name}/{sys_id}")
        if not deleted:
            _logger.warning("Delete of %s/%s: record already gone", self._table_name, sys_id)

        del self[self._position]
        return deleted

    def insert(self) -> Union[str, bool]:
        """Create the current row as a new record.

        On success the buffer holds only the new record as returned by the
        server (with its generated fields) and its sys_id is returned.
        Otherwise returns False and nothing changes.
        """
        data = dict(self._rows[self._current_index()])
        data.pop("sys_id", None)

        result = self._access.post(f"table/{self._table_name}", data)
        if isinstance(result, dict) and is_valid_sys_id(result.get("sys_id")):
            self.initialize()
            self._rows = [result]
            _logger.info("Inserted %s/%s", self._table_name, result["sys_id"])
            return result["sys_id"]

        _logger.warning("Insert into %s returned no valid sys_id", self._table_name)
        return False

    # --------------------------- Cursor -------------------------------

    def has_next(self) -> bool:
        return self._position + 1 < len(self._rows)

    def next(self) -> bool:
        """Advance the cursor; True while it still points at a row."""
        self._position += 1
        return self.valid()

    def rewind(self) -> None:
        self._position = 0

    def valid(self) -> bool:
        return 0 <= self._position < len(self._rows)

    def _current_index(self) -> int:
        if not self.valid():
            raise PreconditionError(f"No current row in {self._table_name} (buffer is empty)")
        return self._position

    def _seek(self, index: int) -> None:
        if not 0 <= index < len(self._rows):
            raise IndexError(f"Row {index} is not in the buffer of {self._table_name}")
        self._position = index

    def _normalize_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"GlideRecord indices must be integers, not {type(index).__name__}")
        if index < 0:
            index += len(self._rows)
        if not 0 <= index < len(self._rows):
            raise IndexError(f"Row index {index} out of range")
        return index

    # --------------------------- Container protocol -------------------

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[GlideRow]:
        """Walk the buffer from the first row, moving the cursor along.

        Deleting rows while iterating is allowed: when the row at or before
        the cursor disappears, the next row has slid into the current index
        and is visited next instead of being skipped.
        """
        index = 0
        while index < len(self._rows):
            current = self._rows[index]
            count = len(self._rows)
            self._position = index
            yield GlideRow(self, index)

            shrunk = len(self._rows) < count
            if not shrunk or (index < len(self._rows) and self._rows[index] is current):
                index += 1
        self._position = index

    def __getitem__(self, index: int) -> GlideRow:
        index = self._normalize_index(index)
        self._position = index
        return GlideRow(self, index)

    def __setitem__(self, index: int, value: Dict[str, Any]) -> None:
        if not isinstance(value, dict):
            raise ValidationError("Cannot directly set a non-dict value!")
        index = self._normalize_index(index)
        row = dict(value)
        self._rows[index] = row
        self._modified[index] = list(row.keys())

    def __delitem__(self, index: int) -> None:
        index = self._normalize_index(index)
        del self._rows[index]
        del self._modified[index]
        if self._position == index:
            self.rewind()
        elif self._position > index:
            self._position -= 1

    def __repr__(self) -> str:
        return (
            f"<GlideRecord {self._table_name} rows={len(self._rows)} "
            f"position={self._position}>"
        )
