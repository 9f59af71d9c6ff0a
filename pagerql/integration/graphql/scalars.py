""" JSON scalar: arbitrary values, as they are """

from typing import Any

import graphql


def _parse_literal(value_node: graphql.ValueNode, variables: dict[str, Any] = None) -> Any:
    return graphql.value_from_ast_untyped(value_node, variables)


GraphQLJSON = graphql.GraphQLScalarType(
    name='JSON',
    description='Arbitrary JSON value',
    serialize=lambda value: value,
    parse_value=lambda value: value,
    parse_literal=_parse_literal,
)
