import base64

import pytest

from pagerql.features.cursor import (
    encode_opaque_cursor, decode_opaque_cursor,
    KeysetCursor, KeysetCursorData, OffsetCursor, OffsetCursorData,
)
from pagerql.operations import OrderField, SortingDirection
from pagerql.query import QueryDescriptor
from pagerql.testing import stmt2sql

from .util.models import Item


def b64(s: str) -> str:
    return base64.b64encode(s.encode()).decode()


@pytest.mark.parametrize(('data', 'expected'), [
    ('3', 'Mw=='),
    ('{"values":{"value":20,"id":3}}', b64('{"values":{"value":20,"id":3}}')),
    ('привет', b64('привет')),
])
def test_opaque_cursor(data: str, expected: str):
    """ Test: opaque cursors are base64 of UTF-8 """
    assert encode_opaque_cursor(data) == expected
    assert decode_opaque_cursor(expected) == data


@pytest.mark.parametrize('cursor', [
    None,
    '',
    '2',  # incorrect padding
    '////',  # not UTF-8
])
def test_opaque_cursor_malformed(cursor):
    """ Test: malformed cursors decode to None """
    assert decode_opaque_cursor(cursor) is None


def test_offset_cursor_data():
    """ Test: OffsetCursorData """
    assert OffsetCursorData.decode(b64('5')) == OffsetCursorData(offset=5)
    assert OffsetCursorData.decode(b64('-5')) == OffsetCursorData(offset=0)

    # Not a number: ignored
    assert OffsetCursorData.decode(b64('abc')) is None
    assert OffsetCursorData.decode(b64('1_000')) is None
    assert OffsetCursorData.decode(b64('\u0661\u0662')) is None  # non-ASCII digits
    assert OffsetCursorData.decode(None) is None

    # Too big for a BIGINT: ignored
    assert OffsetCursorData.decode(b64('99999999999999999999999')) is None
    assert OffsetCursorData.decode(b64(str(2**63 - 1))) == OffsetCursorData(offset=2**63 - 1)

    assert OffsetCursorData(offset=2).encode() == b64('2')


def test_keyset_cursor_data():
    """ Test: KeysetCursorData, both flavors """
    ordering = (OrderField('value', SortingDirection.DESC), OrderField('id', SortingDirection.DESC))

    # Structured
    cursor = KeysetCursorData.decode(b64('{"values":{"value":20,"id":3}}'))
    assert cursor.values == {'value': 20, 'id': 3}
    assert cursor.values_for(ordering) == {'value': 20, 'id': 3}
    assert cursor.serialize() == '{"values":{"value":20,"id":3}}'

    # Plain: the value of the first ordering column
    cursor = KeysetCursorData.decode(b64('20'))
    assert cursor.values is None
    assert cursor.value == '20'
    assert cursor.values_for(ordering) == {'value': '20'}
    assert cursor.serialize() == '20'

    # JSON, but not structured: plain
    cursor = KeysetCursorData.decode(b64('[1,2]'))
    assert cursor.value == '[1,2]'

    # Malformed
    assert KeysetCursorData.decode('2') is None


@pytest.mark.parametrize(('ordering', 'cursor', 'expected_where'), [
    # One column, ASC
    (
        [OrderField('id', SortingDirection.ASC)],
        KeysetCursorData(values=None, value='3'),
        ['WHERE items.id > 3'],
    ),
    # One column, DESC
    (
        [OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values=None, value='3'),
        ['WHERE items.id < 3'],
    ),
    # Two columns, mixed directions. NULLs follow any value
    (
        [OrderField('value', SortingDirection.ASC), OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values={'value': 20, 'id': 3}),
        ['items.value > 20', 'items.value IS NULL', 'items.value = 20 AND items.id < 3'],
    ),
    # A value is missing: the disjunct that needs it is omitted
    (
        [OrderField('value', SortingDirection.ASC), OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values={'id': 3}),
        None,
    ),
    (
        [OrderField('value', SortingDirection.ASC), OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values={'value': 20}),
        ['items.value > 20', 'items.value IS NULL'],
    ),
    # A NULL: only other NULLs follow
    (
        [OrderField('value', SortingDirection.ASC), OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values={'value': None, 'id': 3}),
        ['WHERE items.value IS NULL AND items.id < 3'],
    ),
    (
        [OrderField('value', SortingDirection.DESC)],
        KeysetCursorData(values={'value': None}),
        ['WHERE false'],
    ),
    # Values that do not fit the column are taken as missing
    (
        [OrderField('value', SortingDirection.ASC), OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values={'value': 'abc', 'id': 3}),
        None,
    ),
    (
        [OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values={'id': {'a': 1}}),
        None,
    ),
    (
        [OrderField('id', SortingDirection.DESC)],
        KeysetCursorData(values=None, value='99999999999999999999999'),
        None,
    ),
])
def test_keyset_filter_sql(ordering: list[OrderField], cursor: KeysetCursorData, expected_where):
    """ Test: the row-value comparison """
    impl = KeysetCursor(tuple(ordering), ('id',))
    query = impl.apply_to_query(QueryDescriptor.for_model(None, Item), cursor, 10)
    sql = stmt2sql(query.stmt)

    if expected_where is None:
        assert 'WHERE' not in sql
    else:
        for expected in expected_where:
            assert expected in sql

    # One extra row
    assert 'LIMIT 11' in sql


def test_keyset_generate_cursor():
    """ Test: cursors for records """
    item = Item(id=3, value=20, name='C')

    # One ordering column: plain
    impl = KeysetCursor((OrderField('id', SortingDirection.DESC),), ('id',))
    assert impl.generate_cursor(item, 0, None) == b64('3')

    # Many: structured. Cursor columns go first
    impl = KeysetCursor((OrderField('value', SortingDirection.DESC), OrderField('id', SortingDirection.DESC)), ('id',))
    assert decode_opaque_cursor(impl.generate_cursor(item, 0, None)) == '{"values":{"id":3,"value":20}}'

    # One ordering column, NULL: structured
    impl = KeysetCursor((OrderField('value', SortingDirection.DESC),), ('value',))
    assert decode_opaque_cursor(impl.generate_cursor(Item(id=4, value=None), 0, None)) == '{"values":{"value":null}}'


def test_offset_generate_cursor():
    """ Test: offset cursors count consumed rows """
    impl = OffsetCursor((OrderField('id', SortingDirection.ASC),), ('id',))
    assert impl.generate_cursor(Item(id=1), 0, None) == b64('1')
    assert impl.generate_cursor(Item(id=1), 1, None) == b64('2')
    assert impl.generate_cursor(Item(id=1), 1, OffsetCursorData(offset=4)) == b64('6')

    query = impl.apply_to_query(QueryDescriptor.for_model(None, Item), OffsetCursorData(offset=4), 2)
    sql = stmt2sql(query.stmt)
    assert 'LIMIT 3 OFFSET 4' in sql
