from __future__ import annotations

import logging
from typing import Optional, NamedTuple

from pagerql.sainfo.columns import coerce_int
from pagerql.typing import Record
from pagerql.query import QueryDescriptor

from .base import CursorImplementation
from .encode import encode_opaque_cursor, decode_opaque_cursor


logger = logging.getLogger(__name__)


class OffsetCursorData(NamedTuple):
    """ Cursor data for the "offset" cursor """
    # How many rows have been consumed so far
    offset: int

    def serialize(self) -> str:
        return str(self.offset)

    def encode(self) -> str:
        return encode_opaque_cursor(self.serialize())

    @classmethod
    def decode(cls, cursor: Optional[str]) -> Optional[OffsetCursorData]:
        data = decode_opaque_cursor(cursor)
        if data is None:
            return None

        # Not a number, or too big? Start from the beginning
        try:
            offset = coerce_int(data)
        except ValueError as e:
            logger.debug('Ignored an offset cursor: %s', e)
            return None

        return cls(offset=max(offset, 0))


class OffsetCursor(CursorImplementation[OffsetCursorData]):
    """ Cursor implementation: "offset". Uses OFFSET/LIMIT to paginate a query. """
    name = 'offset'

    def decode_cursor(self, after: Optional[str]) -> Optional[OffsetCursorData]:
        return OffsetCursorData.decode(after)

    def apply_to_query(self, query: QueryDescriptor, cursor: Optional[OffsetCursorData], limit: int) -> QueryDescriptor:
        offset = cursor.offset if cursor else 0
        return query.offset(offset).limit(limit + 1)

    def generate_cursor(self, record: Record, index: int, cursor: Optional[OffsetCursorData]) -> str:
        # The number of rows consumed, including this one.
        # Feed it back as an offset, and you'll get the row that follows.
        offset = cursor.offset if cursor else 0
        return OffsetCursorData(offset=offset + index + 1).encode()
