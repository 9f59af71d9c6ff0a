""" Relay pagination: the result format """

from __future__ import annotations

from typing import Callable, Optional, TypedDict

from pagerql.typing import Record


def relay_result(nodes: list[Record], *, first: int, total: int, cursor_for: Callable[[Record, int], str]) -> ConnectionDict:
    """ Format a list of nodes as a Relay connection

    Args:
        nodes: Loaded rows. Expected to have one extra row, if there's a next page
        first: Page size
        total: The number of matching rows, ignoring pagination
        cursor_for: func(node, index) that generates an opaque cursor for a node
    """
    # Have next page?
    # We've loaded one extra row. Now remove it.
    has_next_page = bool(first) and len(nodes) > first
    if has_next_page:
        nodes = nodes[:first]

    edges: list[EdgeDict] = [
        {'node': node, 'cursor': cursor_for(node, index)}
        for index, node in enumerate(nodes)
    ]

    return {
        'total': total,
        'edges': edges,
        'pageInfo': {
            'startCursor': edges[0]['cursor'] if edges else None,
            'endCursor': edges[-1]['cursor'] if edges else None,
            'hasNextPage': has_next_page,
        },
    }


class ConnectionDict(TypedDict):
    """ Relay Connection type: paginated list """
    total: int
    edges: list[EdgeDict]
    pageInfo: PageInfoDict


class EdgeDict(TypedDict):
    """ Relay Edge type: paginated item """
    node: Record
    cursor: str


class PageInfoDict(TypedDict):
    """ Relay Page Info """
    startCursor: Optional[str]
    endCursor: Optional[str]
    hasNextPage: bool
