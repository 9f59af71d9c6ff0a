from .base import CursorImplementation
from .encode import encode_opaque_cursor, decode_opaque_cursor
from .offset import OffsetCursor, OffsetCursorData
from .keyset import KeysetCursor, KeysetCursorData
