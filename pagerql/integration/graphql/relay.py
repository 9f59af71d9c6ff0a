""" Relay pagination: GraphQL types """

from __future__ import annotations

from typing import NamedTuple, Union

import graphql

from .scalars import GraphQLJSON


class ConnectionTypes(NamedTuple):
    """ The types that make a Relay connection """
    connection: graphql.GraphQLObjectType
    edge: graphql.GraphQLObjectType
    page_info: graphql.GraphQLObjectType


def page_info_type(name: str) -> graphql.GraphQLObjectType:
    """ Make the `{name}PageInfo` type """
    return graphql.GraphQLObjectType(f'{name}PageInfo', lambda: {
        'startCursor': graphql.GraphQLField(graphql.GraphQLString),
        'endCursor': graphql.GraphQLField(graphql.GraphQLString),
        'hasNextPage': graphql.GraphQLField(graphql.GraphQLBoolean),
    })


def connection_type(name: str, node_type: Union[graphql.GraphQLObjectType, graphql.GraphQLUnionType], *,
                    edge_name: str = None, connection_name: str = None,
                    ) -> ConnectionTypes:
    """ Make Relay types for a node type: `{name}Connection`, `{name}Edge`, `{name}PageInfo`

    The fields are resolved with the default resolver: they read keys of the dict that ConnectionResolver returns.
    Cursors are already opaque.
    """
    page_info = page_info_type(name)

    edge = graphql.GraphQLObjectType(edge_name or f'{name}Edge', lambda: {
        'node': graphql.GraphQLField(node_type),
        'cursor': graphql.GraphQLField(graphql.GraphQLString),
    })

    connection = graphql.GraphQLObjectType(connection_name or f'{name}Connection', lambda: {
        'total': graphql.GraphQLField(graphql.GraphQLInt),
        'edges': graphql.GraphQLField(graphql.GraphQLList(edge)),
        'pageInfo': graphql.GraphQLField(page_info),
    })

    return ConnectionTypes(connection=connection, edge=edge, page_info=page_info)


def connection_arguments(**extra: graphql.GraphQLArgument) -> dict[str, graphql.GraphQLArgument]:
    """ Arguments of a paginated field

    `last` and `before` are accepted, but ignored: backwards pagination is not supported.
    """
    return {
        'first': graphql.GraphQLArgument(graphql.GraphQLInt),
        'last': graphql.GraphQLArgument(graphql.GraphQLInt),
        'after': graphql.GraphQLArgument(graphql.GraphQLString),
        'before': graphql.GraphQLArgument(graphql.GraphQLString),
        'keyword': graphql.GraphQLArgument(graphql.GraphQLString),
        'orderBy': graphql.GraphQLArgument(graphql.GraphQLString),
        'filterBy': graphql.GraphQLArgument(GraphQLJSON),
        **extra,
    }
