""" Connection Resolver: paginated lists in the Relay format """

from .settings import ConnectionSettings
from .request import PageRequest
from .relay import relay_result, ConnectionDict, EdgeDict, PageInfoDict
from .resolver import ConnectionResolver, connection_resolver
