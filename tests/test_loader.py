import asyncio

import pytest

from pagerql import exc
from pagerql.loader import Loader, LoaderRegistry


async def test_acquire_is_idempotent():
    """ Test: one loader per name """
    registry = LoaderRegistry()

    async def batch_a(keys):
        return keys

    async def batch_b(keys):
        return [None for _ in keys]

    loader = registry.acquire('User-Article', batch_a)
    assert isinstance(loader, Loader)
    assert registry.acquire('User-Article', batch_b) is loader
    assert registry.get('User-Article') is loader
    assert 'User-Article' in registry
    assert len(registry) == 1

    # Another name: another loader
    assert registry.acquire('User-Profile', batch_b) is not loader
    assert len(registry) == 2
    assert registry.get('nonexistent') is None


async def test_loads_are_batched():
    """ Test: loads made within one turn of the event loop make one batch, results go in order """
    calls = []

    async def batch_fn(keys):
        calls.append(list(keys))
        return [key * 10 for key in keys]

    loader = LoaderRegistry().acquire('test', batch_fn)
    results = await asyncio.gather(*(loader.load(n) for n in (3, 1, 2)))

    assert results == [30, 10, 20]
    assert calls == [[3, 1, 2]]

    # Memoized
    assert await loader.load(1) == 10
    assert calls == [[3, 1, 2]]

    # A new batch for new keys
    assert await loader.load(4) == 40
    assert calls == [[3, 1, 2], [4]]


async def test_unhashable_keys():
    """ Test: dict rows can be keys """
    async def batch_fn(keys):
        return [key['id'] for key in keys]

    loader = LoaderRegistry().acquire('test', batch_fn)
    assert await asyncio.gather(loader.load({'id': 1}), loader.load({'id': 2})) == [1, 2]


async def test_batch_errors():
    """ Test: batch errors are given to every load() """
    async def batch_fn(keys):
        raise RuntimeError('db down')

    loader = LoaderRegistry().acquire('test', batch_fn)
    with pytest.raises(RuntimeError):
        await asyncio.gather(loader.load(1), loader.load(2))


async def test_kind_conflict():
    """ Test: loaders of different kinds can't share a name """
    registry = LoaderRegistry()

    async def batch_fn(keys):
        return keys

    loader = registry.acquire('User-Article', batch_fn, kind='has-many')
    assert loader.kind == 'has-many'
    assert registry.acquire('User-Article', batch_fn, kind='has-many') is loader

    with pytest.raises(exc.ConfigurationError):
        registry.acquire('User-Article', batch_fn, kind='has-one')
    with pytest.raises(exc.ConfigurationError):
        registry.acquire('User-Article', batch_fn)
