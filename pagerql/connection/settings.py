from __future__ import annotations

import dataclasses
from collections import abc
from typing import Callable, Optional, Union

from pagerql.context import get_session
from pagerql.operations.filter import Filterable
from pagerql.operations.ordering import ColumnAllowList
from pagerql.query import QueryDescriptor
from pagerql.typing import Context, Record, SAModel


@dataclasses.dataclass
class ConnectionSettings:
    """ Settings for the Connection Resolver

    This object defines what to query, how to filter and sort it, and how to paginate it.
    """
    # The model to query
    model: Optional[SAModel] = None

    # Query factory: func(context, parent) -> QueryDescriptor
    # Default: select every row of `model`, using the session from the context
    query: Optional[Callable[[Context, Optional[Record]], QueryDescriptor]] = None

    # Columns to search the `keyword` in
    searchable: abc.Sequence[str] = ()

    # Columns that the user can sort by with `orderBy`: a list of names, or a predicate function
    sortable: Optional[ColumnAllowList] = ()

    # How to apply `filterBy`. See: pagerql.operations.filter
    filterable: Filterable = None

    # The `first` you get by default, if not specified
    default_limit: int = 10

    # The max number of items you get, regardless of `first`
    max_limit: Optional[int] = None

    # Column(s) to build keyset cursors from
    cursor_column: Union[str, abc.Sequence[str]] = 'id'

    # Use offset pagination instead of keyset pagination
    use_offset: bool = False

    @property
    def cursor_columns(self) -> tuple[str, ...]:
        """ Cursor columns, as a tuple """
        if not self.cursor_column:
            return ()
        elif isinstance(self.cursor_column, str):
            return (self.cursor_column,)
        else:
            return tuple(self.cursor_column)

    # ### Callbacks for ConnectionResolver

    def get_final_limit(self, first: Optional[int]) -> int:
        """ Callback that fine-tunes the page size by applying default and max limits """
        # Apply default limit
        limit = first if first and first > 0 else self.default_limit

        # Apply max limit
        if self.max_limit:
            limit = min(limit, self.max_limit)

        # Done
        return limit

    def make_query(self, context: Context, parent: Optional[Record]) -> QueryDescriptor:
        """ Callback that prepares the base query

        Default behavior: use `query(context, parent)`, fall back to selecting every row of `model`
        """
        if self.query is not None:
            return self.query(context, parent)

        assert self.model is not None, 'ConnectionSettings needs either a `model` or a `query`'
        return QueryDescriptor.for_model(get_session(context), self.model)
