""" Batch presets: GraphQL resolvers that load relations without N+1 queries

Every resolver call loads one parent's relation through a named loader.
All sibling parents at one level of a GraphQL selection share the loader, so one query serves them all.

Example:
    UserType = graphql.GraphQLObjectType('User', lambda: {
        'id': graphql.GraphQLField(graphql.GraphQLID),
        'articles': graphql.GraphQLField(graphql.GraphQLList(ArticleType), resolve=batch.has_many(Article)),
        'profile': graphql.GraphQLField(ProfileType, resolve=batch.has_one(Profile)),
        'tags': graphql.GraphQLField(graphql.GraphQLList(TagType), resolve=batch.belongs_to_many('tags')),
    })

The request context must provide a database session and a LoaderRegistry:

    context_value={'session': ssn, 'loader': LoaderRegistry()}
"""

from __future__ import annotations

from collections import abc
from typing import Any, Awaitable, Callable, Optional, Union

import graphql
import sqlalchemy as sa

from pagerql import exc
from pagerql.context import get_loader, get_session
from pagerql.query import QueryDescriptor
from pagerql.sainfo.models import model_of
from pagerql.typing import Context, Record, SAModel

from .relations import RelationKind, RelationDescriptor, STRATEGIES, Asserter, default_asserter


# Resolver: graphql-core style
Resolver = Callable[..., Awaitable[Any]]

# Fetch function: func(parents, info) -> items
FetchFunc = Callable[[list[Record], graphql.GraphQLResolveInfo], Awaitable[list]]

# Assemble function: func(items, parents) -> results, one for every parent
AssembleFunc = Callable[[list, list[Record]], list]

# Loader registry accessor: func(context) -> registry
GetLoaderFunc = Callable[[Context], Any]


def load(name: Union[str, Callable[[Record], str]], fetch: FetchFunc, assemble: AssembleFunc, *,
         kind: abc.Hashable = None,
         get_loader: GetLoaderFunc = get_loader) -> Resolver:
    """ Generic batch loading resolver

    Args:
        name: Loader name, or func(root) that gives one
        fetch: Load items for a batch of parents
        assemble: Distribute items between parents
        kind: What the loader loads. Loaders of different kinds can't share a name
        get_loader: Get the Loader Registry from the request context

    Raises:
        exc.LoaderUnavailable: the context has no Loader Registry
        exc.ConfigurationError: the loader name is taken by a loader of a different kind
    """
    async def resolve(root: Record, info: graphql.GraphQLResolveInfo, **arguments):
        registry = get_loader(info.context)
        if not callable(getattr(registry, 'acquire', None)):
            raise exc.LoaderUnavailable(registry)

        # Only used if the loader is created by this call
        async def batch_fn(parents: list[Record]) -> list:
            items = await fetch(parents, info)
            return assemble(items, parents)

        loader_name = name(root) if callable(name) else name
        return await registry.acquire(loader_name, batch_fn, kind=kind).load(root)

    return resolve


def relation_loader(kind: RelationKind, model: Optional[SAModel] = None, *,
                    relation: Optional[str] = None,
                    parent: Optional[SAModel] = None,
                    name: Optional[str] = None,
                    foreign_key: Optional[str] = None,
                    parent_key: Optional[str] = None,
                    unique_key: Optional[str] = None,
                    where: Optional[Callable[[QueryDescriptor, graphql.GraphQLResolveInfo], Optional[QueryDescriptor]]] = None,
                    modify: Union[None, sa.sql.ColumnElement, abc.Iterable[sa.sql.ColumnElement]] = None,
                    query: Optional[Callable[[QueryDescriptor], Optional[QueryDescriptor]]] = None,
                    asserter: Asserter = default_asserter,
                    get_loader: GetLoaderFunc = get_loader,
                    ) -> Resolver:
    """ Batch loading resolver for a relation

    Args:
        kind: Relation kind
        model: The related model. Not needed when `relation` is given
        relation: Relationship name, for ManyToMany
        parent: The parent model. Default: the model of the root object
        name: Loader name. Default: "Parent-Related", or "Parent-Related-many-to-many"
        foreign_key: See RelationDescriptor
        parent_key: See RelationDescriptor
        unique_key: See RelationDescriptor
        where: Customize the query: func(query, info). Is given the resolve info of the first call in the batch
        modify: Additional criteria for the query
        query: Customize the query, last: func(query)
        asserter: func(child, parent) that approves children matched by key
        get_loader: Get the Loader Registry from the request context

    Raises:
        exc.ParentModelRequired: the root object is not a model instance, and `parent` was not given
        exc.RelationNotFound: `relation` was not found on the parent model
        exc.LoaderUnavailable: the context has no Loader Registry
        exc.ConfigurationError: another relation kind uses the same loader name. Use `name`
    """
    # Descriptors are static: one per parent model
    descriptors: dict[SAModel, RelationDescriptor] = {}

    def describe(parent_Model: SAModel) -> RelationDescriptor:
        if parent_Model not in descriptors:
            if kind == RelationKind.MANY_TO_MANY:
                assert relation is not None, 'A many-to-many loader needs the relationship name'
                descriptors[parent_Model] = RelationDescriptor.for_relation_name(parent_Model, relation)
            else:
                assert model is not None, 'A relation loader needs the related model'
                descriptors[parent_Model] = RelationDescriptor.for_models(
                    kind, parent_Model, model,
                    foreign_key=foreign_key, parent_key=parent_key, unique_key=unique_key,
                )
        return descriptors[parent_Model]

    def customize_with(info: graphql.GraphQLResolveInfo):
        def customize(q: QueryDescriptor) -> QueryDescriptor:
            if modify is not None:
                q = q.where(*((modify,) if isinstance(modify, sa.sql.ClauseElement) else modify))
            if where is not None:
                q = where(q, info) or q
            if query is not None:
                q = query(q) or q
            return q
        return customize

    async def resolve(root: Record, info: graphql.GraphQLResolveInfo, **arguments):
        parent_Model = parent or model_of(root)
        if parent_Model is None:
            raise exc.ParentModelRequired(root)

        descriptor = describe(parent_Model)
        strategy = STRATEGIES[descriptor.kind]

        async def fetch(parents: list[Record], info: graphql.GraphQLResolveInfo) -> list:
            session = get_session(info.context)
            return await strategy.fetch(descriptor, session, parents, customize_with(info))

        def assemble(items: list, parents: list[Record]) -> list:
            return strategy.assemble(descriptor, items, parents, asserter)

        resolver = load(name or descriptor.loader_name, fetch, assemble, kind=descriptor.kind, get_loader=get_loader)
        return await resolver(root, info, **arguments)

    return resolve


def fetch(model: SAModel, *, many: bool = True, **options) -> Resolver:
    """ Load children that refer to the parent: a list (HasMany), or the first one (HasOne) """
    return relation_loader(RelationKind.HAS_MANY if many else RelationKind.HAS_ONE, model, **options)


def has_many(model: SAModel, **options) -> Resolver:
    """ Load the list of children that refer to the parent """
    return relation_loader(RelationKind.HAS_MANY, model, **options)


def has_one(model: SAModel, **options) -> Resolver:
    """ Load the first child that refers to the parent """
    return relation_loader(RelationKind.HAS_ONE, model, **options)


def belongs_to(model: SAModel, **options) -> Resolver:
    """ Load the record that the parent refers to """
    return relation_loader(RelationKind.BELONGS_TO, model, **options)


def belongs_to_many(relation: str, **options) -> Resolver:
    """ Load records linked to the parent through a pivot table. Uses the relationship defined on the parent model """
    return relation_loader(RelationKind.MANY_TO_MANY, relation=relation, **options)
