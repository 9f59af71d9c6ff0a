""" Filtering: apply user-provided `filterBy` to a query

Filtering is configured with `filterable`:

* A list of column names: equality filters for columns that have a value in `filterBy`
* A list of functions: each function is given the query and `filterBy`, and is free to do whatever it wants
* A single function: same thing
* A mapping { field name => function }: every function is given the query and the value of its field
"""

from __future__ import annotations

from collections import abc
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pagerql.query import QueryDescriptor


# A custom predicate: func(query, filter_by). May modify the query in place, or return a new one.
PredicateFunc = Callable[[QueryDescriptor, abc.Mapping], Optional[QueryDescriptor]]

# A per-field builder: func(query, value)
FieldBuilderFunc = Callable[[QueryDescriptor, Any], Optional[QueryDescriptor]]


class FilterStrategy:
    """ A way to apply `filterBy` to a query """

    def apply(self, query: QueryDescriptor, filter_by: abc.Mapping) -> QueryDescriptor:
        raise NotImplementedError


@dataclass(frozen=True)
class NamedColumn(FilterStrategy):
    """ Filter: column equals the value from `filterBy`

    Applied only when `filterBy` has a value for this column.
    Lists are compared with IN.
    """
    name: str

    def apply(self, query: QueryDescriptor, filter_by: abc.Mapping) -> QueryDescriptor:
        value = filter_by.get(self.name)
        if value is None:
            return query

        column = query.column(self.name, where='filterBy')
        if isinstance(value, (list, tuple)):
            return query.where(column.in_(value))
        else:
            return query.where(column == value)


@dataclass(frozen=True)
class Predicate(FilterStrategy):
    """ Filter: custom function """
    func: PredicateFunc

    def apply(self, query: QueryDescriptor, filter_by: abc.Mapping) -> QueryDescriptor:
        return self.func(query, filter_by) or query


@dataclass(frozen=True)
class FieldBuilders(FilterStrategy):
    """ Filter: custom functions for fields. Only fields present in `filterBy` are applied """
    builders: abc.Mapping[str, FieldBuilderFunc]

    def apply(self, query: QueryDescriptor, filter_by: abc.Mapping) -> QueryDescriptor:
        for name, builder in self.builders.items():
            if name in filter_by:
                query = builder(query, filter_by[name]) or query
        return query


# Configuration value for `filterable`
Filterable = Union[
    None,
    PredicateFunc,
    abc.Mapping[str, FieldBuilderFunc],
    abc.Iterable[Union[str, PredicateFunc, FilterStrategy]],
]


def filter_strategies(filterable: Filterable) -> tuple[FilterStrategy, ...]:
    """ Convert the `filterable` configuration into a list of strategies """
    if not filterable:
        return ()
    elif isinstance(filterable, (str, FilterStrategy)):
        return (_filter_strategy(filterable),)
    elif callable(filterable):
        return (Predicate(filterable),)
    elif isinstance(filterable, abc.Mapping):
        return (FieldBuilders(filterable),)
    else:
        return tuple(_filter_strategy(item) for item in filterable)


def _filter_strategy(item: Union[str, PredicateFunc, FilterStrategy]) -> FilterStrategy:
    if isinstance(item, FilterStrategy):
        return item
    elif isinstance(item, str):
        return NamedColumn(item)
    elif callable(item):
        return Predicate(item)
    else:
        raise NotImplementedError(repr(item))


def apply_filters(query: QueryDescriptor, strategies: abc.Iterable[FilterStrategy], filter_by: Optional[abc.Mapping]) -> QueryDescriptor:
    """ Apply every filter strategy """
    if not filter_by:
        return query

    for strategy in strategies:
        query = strategy.apply(query, filter_by)
    return query
