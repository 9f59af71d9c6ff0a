from collections import abc
from typing import Any, Optional

import sqlalchemy as sa
import sqlalchemy.orm
from sqlalchemy.exc import NoInspectionAvailable

from pagerql.typing import SAModelOrAlias, Record


def unaliased_class(Model: SAModelOrAlias) -> type:
    """ Get the actual model class; unaliased, if was

    Args:
         Model: model class or AliasedClass
    """
    return sa.orm.class_mapper(Model).class_


def model_of(record: Optional[Record]) -> Optional[type]:
    """ Get the model class of a loaded instance, or None if it's not an instance of a mapped class """
    if record is None or isinstance(record, abc.Mapping):
        return None

    try:
        return sa.inspect(record).mapper.class_
    except (NoInspectionAvailable, AttributeError):
        return None


def record_value(record: Record, name: str) -> Any:
    """ Get a value from a record: a dict row or a model instance

    Missing values are given as None
    """
    if isinstance(record, abc.Mapping):
        return record.get(name)
    else:
        return getattr(record, name, None)
