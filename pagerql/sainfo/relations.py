from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
import sqlalchemy.orm
from sqlalchemy.orm import RelationshipProperty

from pagerql.typing import SAModel


def relationships_of(Model: SAModel) -> dict[str, RelationshipProperty]:
    """ Get the static relationship map of a model: { name => relationship } """
    return dict(sa.inspect(Model).relationships.items())


def find_relationship_with_direction(Model: SAModel, target_Model: SAModel, direction) -> Optional[RelationshipProperty]:
    """ Find the first relationship of `Model` that points to `target_Model` with the given direction """
    for relationship in sa.inspect(Model).relationships:
        if relationship.mapper.class_ is target_Model and relationship.direction is direction:
            return relationship
    else:
        return None


def attribute_name_for_column(Model: SAModel, column: sa.Column) -> str:
    """ Get the name of the model attribute that maps the column """
    return sa.inspect(Model).get_property_by_column(column).key


def primary_key_name(Model: SAModel) -> str:
    """ Get the name of the primary key attribute. Only the first column is used for composite keys """
    return attribute_name_for_column(Model, sa.inspect(Model).primary_key[0])
