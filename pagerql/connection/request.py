from __future__ import annotations

from collections import abc
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class PageRequest:
    """ What page the user wants """
    # Page size
    first: Optional[int] = None

    # Opaque cursor: the page starts after it
    after: Optional[str] = None

    # Reserved: backwards pagination is not supported. Accepted, but ignored
    last: Optional[int] = None
    before: Optional[str] = None

    # Search string
    keyword: Optional[str] = None

    # Sort column: "column" for ASC, "-column" for DESC
    order_by: Optional[str] = None

    # Filter values
    filter_by: Optional[abc.Mapping[str, Any]] = None

    @classmethod
    def from_arguments(cls, arguments: abc.Mapping[str, Any]) -> PageRequest:
        """ Get a page request from GraphQL field arguments. Accepts both camelCase and snake_case """
        return cls(
            first=int_or_none(arguments.get('first')),
            after=arguments.get('after') or None,
            last=int_or_none(arguments.get('last')),
            before=arguments.get('before') or None,
            keyword=arguments.get('keyword') or None,
            order_by=arguments.get('orderBy', arguments.get('order_by')) or None,
            filter_by=arguments.get('filterBy', arguments.get('filter_by')) or None,
        )


def int_or_none(value: Any) -> Optional[int]:
    """ Convert to int. Anything that isn't a positive number is None """
    try:
        return int(value) or None
    except (TypeError, ValueError):
        return None
