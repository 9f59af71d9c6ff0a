""" Batch Loader: load related objects for many parents at once """

from .registry import Loader, LoaderRegistry
from .relations import RelationKind, RelationDescriptor, RelationStrategy, STRATEGIES
from . import batch
