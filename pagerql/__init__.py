__version__ = __import__('importlib.metadata').metadata.version('pagerql')

from . import exc

from .query import QueryDescriptor
from .operations import SortingDirection, OrderField
from .connection import ConnectionSettings, ConnectionResolver, connection_resolver, PageRequest, relay_result
from .features.cursor import KeysetCursor, OffsetCursor
from .loader import Loader, LoaderRegistry, RelationKind
from .loader import batch
