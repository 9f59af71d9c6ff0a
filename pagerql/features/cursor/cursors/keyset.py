from __future__ import annotations

import datetime
import json
import logging
from typing import Any, Optional, NamedTuple

import sqlalchemy as sa

from pagerql.operations.ordering import OrderField
from pagerql.query import QueryDescriptor
from pagerql.sainfo.columns import coerce_column_value
from pagerql.sainfo.models import record_value
from pagerql.typing import Record

from .base import CursorImplementation
from .encode import encode_opaque_cursor, decode_opaque_cursor


logger = logging.getLogger(__name__)


class KeysetCursorData(NamedTuple):
    """ Cursor data for the "keyset" cursor

    Comes in two flavors:
    * Structured: `{"values": {column: value, ...}}`, one value per ordering column
    * Plain: a bare string value. Used when the ordering has exactly one column, and the value is not NULL.
      Also, any cursor that is not a structured one is taken as a plain cursor.
    """
    # Values of the ordering columns: { column name => raw value }. A None is a NULL
    # None for plain cursors
    values: Optional[dict[str, Any]]

    # The value of a plain cursor
    value: Optional[str] = None

    def serialize(self) -> str:
        if self.values is None:
            return self.value  # type: ignore[return-value]
        else:
            return json.dumps({'values': self.values}, separators=(',', ':'), default=str)

    def encode(self) -> str:
        return encode_opaque_cursor(self.serialize())

    @classmethod
    def decode(cls, cursor: Optional[str]) -> Optional[KeysetCursorData]:
        data = decode_opaque_cursor(cursor)
        if data is None:
            return None

        # Structured cursor?
        try:
            parsed = json.loads(data)
        except ValueError:
            parsed = None

        if isinstance(parsed, dict) and isinstance(parsed.get('values'), dict):
            return cls(values=parsed['values'])
        # Plain value
        else:
            return cls(values=None, value=data)

    def values_for(self, ordering: tuple[OrderField, ...]) -> dict[str, Any]:
        """ Get cursor values by column name. A plain cursor is the value of the first ordering column """
        if self.values is not None:
            return self.values
        elif ordering:
            return {ordering[0].column: self.value}
        else:
            return {}


class KeysetCursor(CursorImplementation[KeysetCursorData]):
    """ Cursor implementation: "keyset". Uses the values of the last seen row to position the window

    Given an ordering (a ASC, b DESC, c ASC) and a cursor (va, vb, vc), the window starts with rows that follow:

        (a > va) OR
        (a = va AND b < vb) OR
        (a = va AND b = vb AND c > vc)

    This is a row-value comparison, unrolled to support mixed sorting directions.
    """
    name = 'keyset'

    @property
    def column_names(self) -> tuple[str, ...]:
        """ Columns a cursor remembers: cursor columns first, then other ordering columns """
        extra = tuple(field.column for field in self.ordering if field.column not in self.cursor_columns)
        return self.cursor_columns + extra

    def decode_cursor(self, after: Optional[str]) -> Optional[KeysetCursorData]:
        return KeysetCursorData.decode(after)

    def apply_to_query(self, query: QueryDescriptor, cursor: Optional[KeysetCursorData], limit: int) -> QueryDescriptor:
        if cursor is not None:
            condition = self.filter_expression(query, cursor)
            if condition is not None:
                query = query.where(condition)

        return query.limit(limit + 1)

    def filter_expression(self, query: QueryDescriptor, cursor: KeysetCursorData) -> Optional[sa.sql.ColumnElement]:
        """ Build the row-value comparison: rows that follow the cursor

        Columns with no value in the cursor are skipped: a disjunct that would need such a column is omitted.
        Values that do not fit their column are taken as missing.
        Returns None if nothing is left to compare.

        NULLs go last in both directions, so:
        * a NULL follows any value: `(a > va OR a IS NULL)`
        * only another NULL follows a NULL, and it's equal: `a IS NULL` in equalities, no disjunct of its own
        """
        values = cursor.values_for(self.ordering)

        # { column name => (column, value) }, for every usable value
        known = {}
        for field in self.ordering:
            if field.column not in values:
                continue

            column = query.column(field.column, where='after')
            try:
                known[field.column] = column, coerce_column_value(column, values[field.column])
            except ValueError as e:
                logger.debug('Keyset cursor: ignored the value of %r: %s', field.column, e)

        conditions = []
        usable = False
        for index, field in enumerate(self.ordering):
            # No value to compare with
            if field.column not in known:
                continue

            # Every preceding column needs a value to compare for equality
            preceding = self.ordering[:index]
            if any(prev.column not in known for prev in preceding):
                continue

            usable = True
            col, val = known[field.column]
            if val is None:
                continue

            # (prev1 = v1 AND prev2 = v2 AND ... AND column <op> v)
            equalities = [is_equal(*known[prev.column]) for prev in preceding]
            conditions.append(sa.and_(*equalities, follows(field, col, val)))

        if not usable:
            logger.debug('Keyset cursor %r has no values for the ordering %r', cursor, self.ordering)
            return None
        elif not conditions:
            # NULLs all the way: nothing follows
            return sa.false()

        return sa.or_(*conditions)

    def generate_cursor(self, record: Record, index: int, cursor: Optional[KeysetCursorData]) -> str:
        # One column: a plain cursor. A NULL can't be told from a string "null" there: it gets a structured one
        value = record_value(record, self.ordering[0].column) if len(self.ordering) == 1 else None
        if value is not None:
            return KeysetCursorData(values=None, value=stringify_cursor_value(value)).encode()
        # Many columns: a structured cursor
        else:
            values = {name: record_value(record, name) for name in self.column_names}
            return KeysetCursorData(values=values).encode()


def is_equal(column: sa.sql.ColumnElement, value: Any) -> sa.sql.ColumnElement:
    """ `column = value`, or `column IS NULL` """
    return column.is_(None) if value is None else column == value


def follows(field: OrderField, column: sa.sql.ColumnElement, value: Any) -> sa.sql.ColumnElement:
    """ `column <op> value`. NULLs go last: they follow any value """
    comparison = field.comparison(column, value)
    if is_nullable(column):
        return sa.or_(comparison, column.is_(None))
    else:
        return comparison


def is_nullable(column: sa.sql.ColumnElement) -> bool:
    """ Can the column be NULL? Expressions are assumed to be nullable """
    return getattr(getattr(column, 'expression', column), 'nullable', True) is not False


def stringify_cursor_value(value: Any) -> str:
    """ Convert a value for a plain cursor """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    elif isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    else:
        return str(value)
