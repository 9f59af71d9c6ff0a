from __future__ import annotations

from typing import Optional, TypeVar, Generic, ClassVar, TYPE_CHECKING

from pagerql.typing import Record

if TYPE_CHECKING:
    from pagerql.operations.ordering import Ordering
    from pagerql.query import QueryDescriptor


# A Cursor Data class: the data that a cursor contains
CursorDataT = TypeVar('CursorDataT')


class CursorImplementation(Generic[CursorDataT]):
    """ Pagination strategy: how to position a query window, and how to point at a row

    An implementation is bound to the ordering in effect: a cursor only makes sense relative to the ordering
    that was used when it was generated.
    """
    # Name for this cursor. Used to indicate its type
    name: ClassVar[str]

    # Ordering in effect
    ordering: Ordering

    # Columns that the cursor is configured to point with
    cursor_columns: tuple[str, ...]

    def __init__(self, ordering: Ordering, cursor_columns: tuple[str, ...]):
        self.ordering = ordering
        self.cursor_columns = cursor_columns

    __slots__ = 'ordering', 'cursor_columns'

    def decode_cursor(self, after: Optional[str]) -> Optional[CursorDataT]:
        """ Decode the opaque `after` cursor. Give None if there is no usable cursor """
        raise NotImplementedError

    def apply_to_query(self, query: QueryDescriptor, cursor: Optional[CursorDataT], limit: int) -> QueryDescriptor:
        """ Position the query window after the cursor, limit it

        We will always load one more row to check if there's a next page
        """
        raise NotImplementedError

    def generate_cursor(self, record: Record, index: int, cursor: Optional[CursorDataT]) -> str:
        """ Generate an opaque cursor pointing at a record

        Args:
            record: The record to point at
            index: The index of the record within the page
            cursor: The cursor that the page was loaded with
        """
        raise NotImplementedError
