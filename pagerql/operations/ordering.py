""" Ordering: which columns to sort by, in which direction """

from __future__ import annotations

import operator
from collections import abc
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union, TYPE_CHECKING

import sqlalchemy as sa

from pagerql import exc

if TYPE_CHECKING:
    from pagerql.query import QueryDescriptor


class SortingDirection(Enum):
    ASC = 'ASC'
    DESC = 'DESC'


@dataclass(frozen=True)
class OrderField:
    """ A column to sort by, and the direction """
    column: str
    direction: SortingDirection

    __slots__ = 'column', 'direction'

    @property
    def comparison(self) -> Callable[[sa.sql.ColumnElement, object], sa.sql.ColumnElement]:
        """ The operator that selects rows that follow a value: '>' for ASC, '<' for DESC """
        return operator.gt if self.direction == SortingDirection.ASC else operator.lt

    def compile(self, query: QueryDescriptor) -> sa.sql.ColumnElement:
        """ Make a sorting expression. NULLs always go last """
        column = query.column(self.column, where='orderBy')

        if self.direction == SortingDirection.DESC:
            return column.desc().nullslast()
        else:
            return column.asc().nullslast()

    @classmethod
    def parse(cls, order_by: str) -> OrderField:
        """ Parse an `orderBy` string: "column" for ASC, "-column" for DESC """
        if order_by.startswith('-'):
            return cls(column=order_by.lstrip('-'), direction=SortingDirection.DESC)
        else:
            return cls(column=order_by, direction=SortingDirection.ASC)


# The ordering: a list of fields
Ordering = tuple[OrderField, ...]

# The allow-list of columns: a list of names, or a predicate function
ColumnAllowList = Union[abc.Collection[str], Callable[[str], bool]]


def is_allowed(name: str, allowed: Optional[ColumnAllowList]) -> bool:
    """ Check a column name against an allow-list """
    if not allowed:
        return False
    elif callable(allowed):
        return bool(allowed(name))
    else:
        return name in allowed


def resolve_ordering(order_by: Optional[str], sortable: Optional[ColumnAllowList], cursor_columns: abc.Sequence[str], *, keyset: bool) -> Ordering:
    """ Decide on the ordering

    1. Use `order_by`, if provided and the column is sortable
    2. Otherwise, sort by the first cursor column, DESC
    3. With keyset pagination, every cursor column has to be present: add the missing ones, DESC

    Raises:
        exc.ConfigurationError: no ordering could be resolved
    """
    fields: list[OrderField] = []

    # User-provided ordering
    if order_by:
        field = OrderField.parse(order_by)
        if is_allowed(field.column, sortable):
            fields.append(field)

    # Default ordering
    if not fields and cursor_columns:
        fields.append(OrderField(column=cursor_columns[0], direction=SortingDirection.DESC))

    if not fields:
        raise exc.ConfigurationError('Cannot resolve the ordering: no sortable column was given, and no cursor column is configured')

    # For keyset pagination, ensure all cursor columns are in the ordering
    if keyset:
        names = {field.column for field in fields}
        fields.extend(
            OrderField(column=name, direction=SortingDirection.DESC)
            for name in cursor_columns
            if name not in names
        )

    return tuple(fields)


def apply_ordering(query: QueryDescriptor, ordering: Ordering) -> QueryDescriptor:
    """ Add ORDER BY clauses to the query """
    return query.order_by(*(field.compile(query) for field in ordering))
