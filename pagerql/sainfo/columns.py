from __future__ import annotations

import datetime
import decimal
import re
from functools import cache
from typing import Any

import sqlalchemy as sa
from sqlalchemy.sql.elements import Label

from sqlalchemy.orm import (
    ColumnProperty,
    InstrumentedAttribute,
    MapperProperty,
)

from pagerql.sainfo.names import model_name
from pagerql.typing import SAModelOrAlias, SAAttribute
from pagerql import exc


def resolve_column_by_name(field_name: str, Model: SAModelOrAlias, *, where: str) -> InstrumentedAttribute:
    # As simple as it looks, this code invokes __getattr__() on sa.orm.AliasedClass which adapts the SQL expression
    # to make sure it uses the proper aliased name in queries
    try:
        attribute = getattr(Model, field_name)
    except AttributeError as e:
        raise exc.InvalidColumnError(model_name(Model), field_name, where=where) from e

    # Check that it actually is a column
    if not is_column(attribute):
        raise exc.InvalidColumnError(model_name(Model), field_name, where=where)

    # Done
    return attribute


# region: Column Attribute types

@cache
def is_column(attribute: SAAttribute):
    return (
        is_column_property(attribute) or
        is_column_expression(attribute)
    )


@cache
def is_column_property(attribute: SAAttribute):
    return (
        isinstance(attribute, (InstrumentedAttribute, MapperProperty)) and
        isinstance(attribute.property, ColumnProperty) and
        isinstance(attribute.expression, sa.Column)  # not an expression, but a real column
    )


@cache
def is_column_expression(attribute: SAAttribute):
    return (
        isinstance(attribute, (InstrumentedAttribute, MapperProperty)) and
        isinstance(attribute.expression, Label)  # an expression, not a real column
    )

# endregion

# region Column values

def coerce_column_value(attribute: SAAttribute, value: Any) -> Any:
    """ Convert a value decoded from a cursor into the column's Python type

    Cursors come from JSON or from plain strings: dates and numbers lose their types on the way.

    Raises:
        ValueError: the value does not fit the column
    """
    if value is None:
        return None

    # Only scalars can be compared with a column
    if not isinstance(value, (str, int, float)):
        raise ValueError(f'Not a scalar: {value!r}')

    try:
        python_type = attribute.type.python_type
    except (AttributeError, NotImplementedError):
        return value

    if python_type is bool:
        return coerce_bool(value)
    elif python_type is int:
        return coerce_int(value)

    if isinstance(value, python_type):
        return value

    try:
        if python_type in (datetime.datetime, datetime.date, datetime.time):
            return python_type.fromisoformat(value)
        elif python_type in (float, decimal.Decimal, str):
            return python_type(value)
        else:
            return value
    except (TypeError, decimal.InvalidOperation) as e:
        raise ValueError(f'Not a {python_type.__name__}: {value!r}') from e


# Integers that fit into a BIGINT
MAX_INT = 2**63 - 1


def coerce_int(value: Any) -> int:
    """ Convert to an integer that fits into a BIGINT column """
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f'Not an integer: {value!r}')
    elif isinstance(value, str):
        if not re.fullmatch(r'-?[0-9]+', value):
            raise ValueError(f'Not an integer: {value!r}')

    number = int(value)
    if abs(number) > MAX_INT:
        raise ValueError(f'Integer out of range: {value!r}')
    return number


def coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        value = value.lower()
    if value in ('true', '1', 1, True):
        return True
    elif value in ('false', '0', 0, False):
        return False
    else:
        raise ValueError(f'Not a boolean: {value!r}')

# endregion
