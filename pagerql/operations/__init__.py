from .ordering import SortingDirection, OrderField, Ordering, resolve_ordering, apply_ordering
from .filter import FilterStrategy, NamedColumn, Predicate, FieldBuilders, filter_strategies, apply_filters
from .search import apply_keyword_search
