""" Relations: how to fetch related records for many parents at once, and how to give every parent its share

Every relation kind has a strategy: a fetch function and an assemble function.

* HasMany:      SELECT * FROM related WHERE foreign_key IN (parent keys);  every parent gets a list
* HasOne:       same query;                                                 every parent gets the first match, or None
* BelongsTo:    SELECT * FROM related WHERE unique_key IN (parent foreign keys);  every parent gets one, or None
* ManyToMany:   SELECT related.*, pivot.parent_key FROM related JOIN pivot WHERE pivot.parent_key IN (parent keys);
                every parent gets a list
"""

from __future__ import annotations

import re
from collections import abc, defaultdict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession
from sqlalchemy.orm import MANYTOMANY, MANYTOONE, ONETOMANY, RelationshipProperty

from pagerql import exc
from pagerql.query import QueryDescriptor
from pagerql.sainfo.columns import resolve_column_by_name
from pagerql.sainfo.models import record_value
from pagerql.sainfo.names import model_name
from pagerql.sainfo.relations import (
    relationships_of,
    find_relationship_with_direction,
    attribute_name_for_column,
    primary_key_name,
)
from pagerql.typing import Record, SAModel


# Label for the pivot table column that refers to the parent. Used to match related rows with their parents
PIVOT_KEY = '_pivot_foreign_key'


class RelationKind(Enum):
    HAS_MANY = 'has-many'
    HAS_ONE = 'has-one'
    BELONGS_TO = 'belongs-to'
    MANY_TO_MANY = 'many-to-many'


@dataclass(frozen=True)
class RelationDescriptor:
    """ A relation between two models: everything needed to fetch and assemble related records """
    kind: RelationKind

    # The model that declares the relation, and the model it points to
    parent_Model: SAModel
    related_Model: SAModel

    # HasMany, HasOne: the related column that refers to the parent
    # BelongsTo: the parent column that refers to the related record
    # ManyToMany: the pivot column that refers to the parent
    foreign_key: str

    # The parent column referred to. Not used by BelongsTo
    parent_key: str = 'id'

    # The related column referred to. Used by BelongsTo and ManyToMany
    unique_key: str = 'id'

    # ManyToMany: the pivot table, and its column that refers to the related record
    through: Optional[sa.Table] = None
    through_related_key: Optional[str] = None

    @property
    def loader_name(self) -> str:
        """ The name of the loader: all parents of the same type share it """
        name = f'{model_name(self.parent_Model)}-{model_name(self.related_Model)}'
        if self.kind == RelationKind.MANY_TO_MANY:
            name += '-many-to-many'
        return name

    @classmethod
    def from_relationship(cls, relationship: RelationshipProperty) -> RelationDescriptor:
        """ Describe an SqlAlchemy relationship

        Only the first column pair is used with composite keys.
        """
        parent_Model = relationship.parent.class_
        related_Model = relationship.mapper.class_

        if relationship.direction is ONETOMANY:
            local, remote = relationship.local_remote_pairs[0]
            return cls(
                kind=RelationKind.HAS_MANY if relationship.uselist else RelationKind.HAS_ONE,
                parent_Model=parent_Model,
                related_Model=related_Model,
                foreign_key=attribute_name_for_column(related_Model, remote),
                parent_key=attribute_name_for_column(parent_Model, local),
            )
        elif relationship.direction is MANYTOONE:
            local, remote = relationship.local_remote_pairs[0]
            return cls(
                kind=RelationKind.BELONGS_TO,
                parent_Model=parent_Model,
                related_Model=related_Model,
                foreign_key=attribute_name_for_column(parent_Model, local),
                unique_key=attribute_name_for_column(related_Model, remote),
            )
        elif relationship.direction is MANYTOMANY:
            parent_column, pivot_parent_column = relationship.synchronize_pairs[0]
            related_column, pivot_related_column = relationship.secondary_synchronize_pairs[0]
            return cls(
                kind=RelationKind.MANY_TO_MANY,
                parent_Model=parent_Model,
                related_Model=related_Model,
                foreign_key=pivot_parent_column.key,
                parent_key=attribute_name_for_column(parent_Model, parent_column),
                unique_key=attribute_name_for_column(related_Model, related_column),
                through=relationship.secondary,
                through_related_key=pivot_related_column.key,
            )
        else:
            raise NotImplementedError(relationship.direction)

    @classmethod
    def for_relation_name(cls, parent_Model: SAModel, relation_name: str) -> RelationDescriptor:
        """ Describe a relationship of a model, by name

        Raises:
            exc.RelationNotFound
        """
        try:
            relationship = relationships_of(parent_Model)[relation_name]
        except KeyError as e:
            raise exc.RelationNotFound(model_name(parent_Model), relation_name) from e

        return cls.from_relationship(relationship)

    @classmethod
    def for_models(cls, kind: RelationKind, parent_Model: SAModel, related_Model: SAModel, *,
                   foreign_key: Optional[str] = None,
                   parent_key: Optional[str] = None,
                   unique_key: Optional[str] = None,
                   ) -> RelationDescriptor:
        """ Describe a relation between two models

        Keys that are not given are taken from the SqlAlchemy relationship between the models, if there is one.
        Otherwise, naming conventions are used: "User" -> "user_id"
        """
        # Relationship defined on the parent model?
        direction = MANYTOONE if kind == RelationKind.BELONGS_TO else ONETOMANY
        relationship = find_relationship_with_direction(parent_Model, related_Model, direction)

        if relationship is not None:
            relation = replace(cls.from_relationship(relationship), kind=kind)
        elif kind == RelationKind.BELONGS_TO:
            relation = cls(
                kind=kind,
                parent_Model=parent_Model,
                related_Model=related_Model,
                foreign_key=f'{snake_case(model_name(related_Model))}_id',
                unique_key=primary_key_name(related_Model),
            )
        else:
            relation = cls(
                kind=kind,
                parent_Model=parent_Model,
                related_Model=related_Model,
                foreign_key=f'{snake_case(model_name(parent_Model))}_id',
                parent_key=primary_key_name(parent_Model),
            )

        # Explicit overrides
        overrides = dict(foreign_key=foreign_key, parent_key=parent_key, unique_key=unique_key)
        return replace(relation, **{k: v for k, v in overrides.items() if v is not None})


# region Fetch

# Session to query with
Session = Union[AsyncSession, AsyncConnection]

# Query customizer: func(query) -> query
Customize = Callable[[QueryDescriptor], QueryDescriptor]


async def fetch_by_foreign_key(relation: RelationDescriptor, session: Session, parents: list[Record], customize: Optional[Customize] = None) -> list[Record]:
    """ HasMany, HasOne: load related records that refer to parents """
    keys = distinct_values(parents, relation.parent_key)
    if not keys:
        return []

    query = QueryDescriptor.for_model(session, relation.related_Model).where_in(relation.foreign_key, keys)
    if customize is not None:
        query = customize(query)
    return await query


async def fetch_by_unique_key(relation: RelationDescriptor, session: Session, parents: list[Record], customize: Optional[Customize] = None) -> list[Record]:
    """ BelongsTo: load related records that parents refer to """
    keys = distinct_values(parents, relation.foreign_key)
    if not keys:
        return []

    query = QueryDescriptor.for_model(session, relation.related_Model).where_in(relation.unique_key, keys)
    if customize is not None:
        query = customize(query)
    return await query


async def fetch_through_pivot(relation: RelationDescriptor, session: Session, parents: list[Record], customize: Optional[Customize] = None) -> list[dict]:
    """ ManyToMany: load related records joined with the pivot table

    Every row is a dict: { related model name => related record, PIVOT_KEY => parent key }
    """
    keys = distinct_values(parents, relation.parent_key)
    if not keys:
        return []

    Related = relation.related_Model
    pivot: sa.Table = relation.through  # type: ignore[assignment]
    pivot_parent_column = pivot.c[relation.foreign_key]
    pivot_related_column = pivot.c[relation.through_related_key]  # type: ignore[index]

    stmt = (
        sa.select(Related, pivot_parent_column.label(PIVOT_KEY))
        .join(pivot, resolve_column_by_name(relation.unique_key, Related, where='through') == pivot_related_column)
    )
    query = QueryDescriptor(session, stmt, Related, scalars=False).where(pivot_parent_column.in_(keys))
    if customize is not None:
        query = customize(query)
    return await query


def distinct_values(records: abc.Iterable[Record], name: str) -> list[Any]:
    """ Get distinct non-null values of a field, in order """
    return list(dict.fromkeys(
        value
        for value in (record_value(record, name) for record in records)
        if value is not None
    ))

# endregion

# region Assemble

# Asserter: func(child, parent) -> bool. Decides whether a child that matches by key belongs to the parent
Asserter = Callable[[Any, Record], bool]


def default_asserter(child: Any, parent: Record) -> bool:
    return child is not None and parent is not None


def assemble_one_to_many(relation: RelationDescriptor, children: list[Record], parents: list[Record], asserter: Asserter = default_asserter) -> list[list[Record]]:
    """ HasMany: every parent gets the list of children that refer to it """
    groups = group_by(children, lambda child: record_value(child, relation.foreign_key))

    return [
        [
            child
            for child in groups.get(record_value(parent, relation.parent_key), ())
            if asserter(child, parent)
        ]
        for parent in parents
    ]


def assemble_one_to_one(relation: RelationDescriptor, children: list[Record], parents: list[Record], asserter: Asserter = default_asserter) -> list[Optional[Record]]:
    """ HasOne: every parent gets the first child that refers to it, or None """
    return [
        matching[0] if matching else None
        for matching in assemble_one_to_many(relation, children, parents, asserter)
    ]


def assemble_belongs_to(relation: RelationDescriptor, items: list[Record], parents: list[Record], asserter: Asserter = default_asserter) -> list[Optional[Record]]:
    """ BelongsTo: every parent gets the record it refers to, or None """
    index = {record_value(item, relation.unique_key): item for item in items}

    return [
        index.get(record_value(parent, relation.foreign_key))
        for parent in parents
    ]


def assemble_many_to_many(relation: RelationDescriptor, rows: list[dict], parents: list[Record], asserter: Asserter = default_asserter) -> list[list[Record]]:
    """ ManyToMany: every parent gets the list of related records linked through the pivot table. Never None """
    related_name = model_name(relation.related_Model)
    groups = group_by(rows, lambda row: row[PIVOT_KEY])

    return [
        [
            row[related_name]
            for row in groups.get(record_value(parent, relation.parent_key), ())
            if asserter(row[related_name], parent)
        ]
        for parent in parents
    ]


def group_by(items: abc.Iterable[Any], key: Callable[[Any], Any]) -> dict[Any, list[Any]]:
    """ Group items by key. Items with a None key are dropped """
    groups: dict[Any, list[Any]] = defaultdict(list)
    for item in items:
        k = key(item)
        if k is not None:
            groups[k].append(item)
    return groups

# endregion


@dataclass(frozen=True)
class RelationStrategy:
    """ How to load a relation kind: fetch related records, assemble them for every parent """
    fetch: Callable[[RelationDescriptor, Session, list[Record], Optional[Customize]], Awaitable[list]]
    assemble: Callable[[RelationDescriptor, list, list[Record], Asserter], list]


# Strategies, by relation kind
STRATEGIES: dict[RelationKind, RelationStrategy] = {
    RelationKind.HAS_MANY: RelationStrategy(fetch=fetch_by_foreign_key, assemble=assemble_one_to_many),
    RelationKind.HAS_ONE: RelationStrategy(fetch=fetch_by_foreign_key, assemble=assemble_one_to_one),
    RelationKind.BELONGS_TO: RelationStrategy(fetch=fetch_by_unique_key, assemble=assemble_belongs_to),
    RelationKind.MANY_TO_MANY: RelationStrategy(fetch=fetch_through_pivot, assemble=assemble_many_to_many),
}


def snake_case(name: str) -> str:
    """ Convert a class name to snake case: "BlogPost" -> "blog_post" """
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()
