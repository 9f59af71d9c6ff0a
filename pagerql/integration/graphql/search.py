""" Search: one GraphQL field that paginates any of several models

The user picks the model with the `type` argument, and gets a paginated union of their types:

    query {
        search(type: Article, keyword: "python", first: 10) {
            total
            edges { cursor node { ... on Article { id title } } }
            pageInfo { endCursor hasNextPage }
        }
    }

Example:
    QueryType = graphql.GraphQLObjectType('Query', lambda: {
        'search': search({
            'Article': SearchType(Article, ArticleType, resolver_options={'searchable': ['title']}),
            'User': SearchType(User, UserType, resolver_options={'searchable': ['name']}),
        }),
    })
"""

from __future__ import annotations

import dataclasses
import inspect
from collections import abc
from typing import Any, Callable, Optional, Union

import graphql

from pagerql.connection import ConnectionResolver, ConnectionSettings
from pagerql.connection.request import int_or_none
from pagerql.typing import SAModel

from .relay import connection_type, connection_arguments


@dataclasses.dataclass
class SearchType:
    """ A model that can be searched """
    # The model to query
    model: SAModel

    # The GraphQL type of its objects
    type: graphql.GraphQLObjectType

    # Custom resolver. Default: a ConnectionResolver for the model
    resolve: Optional[Callable] = None

    # ConnectionSettings for the default resolver
    resolver_options: dict[str, Any] = dataclasses.field(default_factory=dict)

    # Wrap the resolver: func(resolver) -> resolver
    compose: Optional[Callable[[Callable], Callable]] = None

    def make_resolver(self, cursor_column: Union[None, str, abc.Sequence[str]] = None) -> Callable:
        """ Get the resolver for this model """
        if self.resolve is not None:
            resolver = self.resolve
        else:
            options = dict(self.resolver_options)
            if cursor_column is not None:
                options.setdefault('cursor_column', cursor_column)
            resolver = ConnectionResolver(ConnectionSettings(model=self.model, **options))

        if self.compose is not None:
            resolver = self.compose(resolver)

        return resolver


def search(searchable: abc.Mapping[str, SearchType], *,
           name: str = '',
           cursor_column: Union[None, str, abc.Sequence[str]] = None,
           args: Optional[dict[str, graphql.GraphQLArgument]] = None,
           ) -> graphql.GraphQLField:
    """ Make a search field

    Args:
        searchable: Search type name => model to search
        name: Prefix for type names: `{name}SearchType`, `{name}SearchItem`, `{name}SearchConnection`, ...
        cursor_column: The cursor column for every default resolver
        args: Additional field arguments. Passed to resolvers as they are
    """
    assert searchable, 'Give at least one search type'
    resolvers = {
        type_name: search_type.make_resolver(cursor_column)
        for type_name, search_type in searchable.items()
    }

    # `type` enum. Its values are resolvers
    SearchTypeEnum = graphql.GraphQLEnumType(f'{name}SearchType', {
        type_name: graphql.GraphQLEnumValue(resolver)
        for type_name, resolver in resolvers.items()
    })

    # Union of searchable types
    def resolve_type(value: Any, info: graphql.GraphQLResolveInfo, abstract_type: graphql.GraphQLUnionType) -> Optional[str]:
        for search_type in searchable.values():
            if isinstance(value, search_type.model):
                return search_type.type.name
        return None

    SearchItem = graphql.GraphQLUnionType(
        f'{name}SearchItem',
        types=[search_type.type for search_type in searchable.values()],
        resolve_type=resolve_type,
    )

    types = connection_type(
        name, SearchItem,
        edge_name=f'{name}SearchItemEdge',
        connection_name=f'{name}SearchConnection',
    )

    async def resolve(root: Any, info: graphql.GraphQLResolveInfo, *, type: Callable, **arguments):
        arguments['first'] = int_or_none(arguments.get('first'))
        arguments['last'] = int_or_none(arguments.get('last'))

        result = type(root, info, **arguments)
        if inspect.isawaitable(result):
            result = await result
        return result

    return graphql.GraphQLField(
        types.connection,
        args=connection_arguments(
            type=graphql.GraphQLArgument(graphql.GraphQLNonNull(SearchTypeEnum)),
            **(args or {}),
        ),
        resolve=resolve,
    )
