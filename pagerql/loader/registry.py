""" Loader Registry: per-request memoized batch loaders

Loaders are batched within one turn of the event loop: every `load()` made before the loop gets a chance
to run the scheduled batch is collected into one call of the batch function.
This is how `strawberry.dataloader.DataLoader` works: it dispatches the batch with `loop.call_soon()`.

The registry has to be created fresh for every request and given to resolvers with the context:

    result = await graphql.graphql(schema, query, context_value={
        'session': ssn,
        'loader': LoaderRegistry(),
    })
"""

from __future__ import annotations

import logging
from collections import abc
from typing import Any, Awaitable, Callable, Optional

from strawberry.dataloader import DataLoader

from pagerql import exc


logger = logging.getLogger(__name__)


# Batch function: func(keys) -> results, one result for every key, in the same order
BatchFunc = Callable[[list[Any]], Awaitable[abc.Sequence[Any]]]


class Loader(DataLoader):
    """ A named batch loader

    Collects keys within one turn of the event loop, calls the batch function once,
    memoizes the results for every key for as long as it lives.
    """
    # Loader name
    name: str

    # The batch function
    batch_fn: BatchFunc

    # What it loads. None for generic loaders
    kind: abc.Hashable

    def __init__(self, name: str, batch_fn: BatchFunc, *, kind: abc.Hashable = None, **kwargs):
        self.name = name
        self.batch_fn = batch_fn
        self.kind = kind
        super().__init__(load_fn=self._load_batch, cache_key_fn=record_cache_key, **kwargs)

    async def _load_batch(self, keys: list[Any]) -> abc.Sequence[Any]:
        logger.debug('Loader %r: loading a batch of %d keys', self.name, len(keys))
        return await self.batch_fn(keys)

    def __repr__(self):
        return f'<{type(self).__name__} {self.name!r}>'


class LoaderRegistry:
    """ Loaders for one request: { name => Loader }

    At most one loader exists for every name: the first `acquire()` creates it, others get the same object.
    """
    Loader = Loader

    def __init__(self):
        self._loaders: dict[str, Loader] = {}

    def acquire(self, name: str, batch_fn: BatchFunc, *, kind: abc.Hashable = None) -> Loader:
        """ Get a loader by name. Create it with `batch_fn`, if it does not exist yet

        Note that `batch_fn` is ignored if the loader already exists.

        Args:
            name: Loader name
            batch_fn: The batch function
            kind: What the loader loads, e.g. a relation kind. Loaders of different kinds can't share a name.

        Raises:
            exc.ConfigurationError: a loader with this name exists, but it loads a different kind of thing
        """
        loader = self._loaders.get(name)
        if loader is None:
            loader = self._loaders[name] = self.Loader(name, batch_fn, kind=kind)
            logger.debug('Created loader %r', name)
        elif loader.kind != kind:
            raise exc.ConfigurationError(
                f'Loader {name!r} loads {loader.kind}, but {kind} was requested. Give one of them a different `name`'
            )
        return loader

    def get(self, name: str) -> Optional[Loader]:
        return self._loaders.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._loaders

    def __len__(self) -> int:
        return len(self._loaders)


def record_cache_key(key: Any) -> abc.Hashable:
    """ Cache key for a record: model instances are hashable, dict rows are taken by identity """
    if isinstance(key, abc.Hashable):
        return key
    else:
        return id(key)
