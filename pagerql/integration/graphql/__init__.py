""" Integration with GraphQL: graphql-core """

# High-level APIs
from .search import search, SearchType
from .relay import connection_type, page_info_type, ConnectionTypes

# Lower-level APIs
from .relay import connection_arguments
from .scalars import GraphQLJSON
