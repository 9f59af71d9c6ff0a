""" Request context access

The request context is whatever the GraphQL engine was given as `context_value`: a dict, or an object.
"""

from collections import abc
from typing import Any

from pagerql.typing import Context


def context_value(context: Context, name: str, default: Any = None) -> Any:
    """ Get a value from the request context: by key, if it's a mapping, or by attribute """
    if context is None:
        return default
    elif isinstance(context, abc.Mapping):
        return context.get(name, default)
    else:
        return getattr(context, name, default)


def get_session(context: Context):
    """ Get the database session from the request context: `context.session` or `context['session']` """
    session = context_value(context, 'session')
    assert session is not None, 'The request context has no "session": cannot query the database'
    return session


def get_loader(context: Context):
    """ Get the Loader Registry from the request context: `context.loader` or `context['loader']` """
    return context_value(context, 'loader')
