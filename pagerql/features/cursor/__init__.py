""" Cursor-based pagination

A cursor is an opaque string that points to a position within an ordered result set.
Two implementations are available:

* Keyset cursors: remember the values of the ordering columns of the last row seen.
  Much more performant than offset pagination: the database doesn't have to scan skipped rows.
* Offset cursors: remember how many rows have been consumed so far.
"""

from .cursors import CursorImplementation, KeysetCursor, OffsetCursor
from .cursors import KeysetCursorData, OffsetCursorData
from .cursors import encode_opaque_cursor, decode_opaque_cursor
