import pytest
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from pagerql import exc
from pagerql.operations import OrderField, SortingDirection, resolve_ordering, apply_ordering, filter_strategies, NamedColumn, Predicate, FieldBuilders
from pagerql.query import QueryDescriptor
from pagerql.testing import insert, stmt2sql

from .util.models import Item, id_manyfields


ASC, DESC = SortingDirection.ASC, SortingDirection.DESC


@pytest.mark.parametrize(('order_by', 'expected'), [
    ('name', OrderField('name', ASC)),
    ('-name', OrderField('name', DESC)),
])
def test_order_field_parse(order_by: str, expected: OrderField):
    assert OrderField.parse(order_by) == expected


@pytest.mark.parametrize(('order_by', 'sortable', 'cursor_columns', 'keyset', 'expected'), [
    # Default: first cursor column, DESC
    (None, (), ('id',), True, [('id', DESC)]),
    ('name', (), ('id',), True, [('id', DESC)]),
    # Sortable
    ('name', ('name',), ('id',), True, [('name', ASC), ('id', DESC)]),
    ('-name', ('name',), ('id',), True, [('name', DESC), ('id', DESC)]),
    ('-name', lambda name: True, ('id',), True, [('name', DESC), ('id', DESC)]),
    # Sorting by a cursor column: not repeated
    ('id', ('id',), ('id',), True, [('id', ASC)]),
    # Many cursor columns: all of them are added
    (None, (), ('created_at', 'id'), True, [('created_at', DESC), ('id', DESC)]),
    ('value', ('value',), ('created_at', 'id'), True, [('value', ASC), ('created_at', DESC), ('id', DESC)]),
    # Offset: cursor columns are not added
    ('value', ('value',), ('created_at', 'id'), False, [('value', ASC)]),
    (None, (), ('created_at', 'id'), False, [('created_at', DESC)]),
    # No cursor columns
    ('value', ('value',), (), True, [('value', ASC)]),
])
def test_resolve_ordering(order_by, sortable, cursor_columns, keyset, expected):
    """ Test: which ordering is used """
    ordering = resolve_ordering(order_by, sortable, cursor_columns, keyset=keyset)
    assert [(field.column, field.direction) for field in ordering] == expected


def test_resolve_ordering_fails():
    """ Test: no ordering at all """
    with pytest.raises(exc.ConfigurationError):
        resolve_ordering(None, ('name',), (), keyset=True)
    with pytest.raises(exc.ConfigurationError):
        resolve_ordering('nonsortable', ('name',), (), keyset=False)


def test_apply_ordering_sql():
    """ Test: NULLS LAST """
    query = apply_ordering(QueryDescriptor.for_model(None, Item), (OrderField('value', ASC), OrderField('id', DESC)))
    assert 'ORDER BY items.value ASC NULLS LAST, items.id DESC NULLS LAST' in stmt2sql(query.stmt)

    with pytest.raises(exc.InvalidColumnError):
        apply_ordering(QueryDescriptor.for_model(None, Item), (OrderField('nonexistent', ASC),))


def test_filter_strategies():
    """ Test: `filterable` configurations """
    def func(query, filter_by):
        return query

    assert filter_strategies(None) == ()
    assert filter_strategies([]) == ()
    assert filter_strategies('name') == (NamedColumn('name'),)
    assert filter_strategies(['name', func]) == (NamedColumn('name'), Predicate(func))
    assert filter_strategies(func) == (Predicate(func),)
    assert filter_strategies({'name': func}) == (FieldBuilders({'name': func}),)


async def test_query_descriptor(connection: AsyncConnection, ssn: AsyncSession):
    """ Test: QueryDescriptor reads """
    await insert(connection, Item, *(id_manyfields('i', n, value=n * 10) for n in range(1, 6)))

    query = QueryDescriptor.for_model(ssn, Item).where(Item.value > 10).order_by(Item.id.desc()).limit(2).offset(1)
    assert [item.id for item in await query] == [4, 3]

    # Counting ignores the window
    assert await query.result_size() == 4

    # where_in()
    query = QueryDescriptor.for_model(ssn, Item).where_in('id', [1, 3]).order_by(Item.id)
    assert [item.id for item in await query.fetchall()] == [1, 3]

    with pytest.raises(exc.InvalidColumnError):
        QueryDescriptor.for_model(ssn, Item).where_in('nonexistent', [1])
