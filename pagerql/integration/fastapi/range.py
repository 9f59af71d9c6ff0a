""" HTTP Range pagination

The client asks for a slice of a collection with the `Range` header:

    GET /articles
    Range: items=0-9

and gets it with a `Content-Range` header, status 206 Partial Content:

    Content-Range: items 0-9/100

Example:
    pagination = RangePagination(maximum=50)

    @app.get('/articles')
    async def articles(response: fastapi.Response, page: Pagination = fastapi.Depends(pagination)):
        total = await count_articles()
        paginate(response, page, total)
        return await load_articles(offset=page.offset, limit=page.limit)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

import fastapi


logger = logging.getLogger(__name__)

# Largest integer a JSON client can represent exactly
MAX_SAFE_INTEGER = 2 ** 53 - 1

# Range header: "items=0-9", "items=10-", "items=10-*"
RANGE_HEADER_RX = re.compile(r'^\s*(?P<unit>[A-Za-z][\w-]*)=(?P<first>\d+)-(?P<last>\d+|\*)?\s*$')


@dataclass
class Pagination:
    """ The slice of a collection the client asked for """
    # The position of the first item
    offset: int

    # The number of items. None for "everything to the end"
    limit: Optional[int]

    # The position of the last item. None for "everything to the end"
    last: Optional[int]

    # Range unit
    unit: str = 'items'


class RangePagination:
    """ FastAPI dependency: get Pagination from the `Range` header

    Without the header, the first `maximum` items are given.

    Raises:
        fastapi.HTTPException(500): invalid `maximum`
        fastapi.HTTPException(412): malformed header, or an unexpected unit
        fastapi.HTTPException(416): unsatisfiable range, or an open range when `allow_all` is off
    """

    def __init__(self, maximum: int = 50, *, allow_all: bool = True, unit: str = 'items'):
        """
        Args:
            maximum: The max number of items on one page
            allow_all: Allow open ranges: "items=10-", "everything from 10th"
            unit: Range unit
        """
        self.maximum = maximum
        self.allow_all = allow_all
        self.unit = unit

    def __call__(self, range_header: Optional[str] = fastapi.Header(None, alias='Range')) -> Pagination:
        first: int = 0
        last: Optional[int] = self.maximum

        if range_header:
            # Validate the configuration
            if isinstance(self.maximum, bool) or not isinstance(self.maximum, int) or not 0 < self.maximum <= MAX_SAFE_INTEGER:
                raise fastapi.HTTPException(500, 'Invalid Configuration')

            unit, first, last = parse_range_header(range_header)
            if unit != self.unit:
                raise fastapi.HTTPException(412, 'Malformed Range Error')

            if last is None and not self.allow_all:
                raise fastapi.HTTPException(416)

            if first > MAX_SAFE_INTEGER or (last is not None and last > MAX_SAFE_INTEGER):
                raise fastapi.HTTPException(416)

        # Limit the page size
        limit = None
        if last is not None:
            if last - first + 1 > self.maximum:
                last = first + self.maximum - 1
            limit = last - first + 1

        logger.debug('Range pagination: offset=%d, limit=%r', first, limit)
        return Pagination(offset=first, limit=limit, last=last, unit=self.unit)


def parse_range_header(value: str) -> tuple[str, int, Optional[int]]:
    """ Parse a `Range` header: "items=0-9" -> ('items', 0, 9)

    Open ranges give `last=None`: "items=10-" -> ('items', 10, None)

    Raises:
        fastapi.HTTPException(412): malformed header
        fastapi.HTTPException(416): the range is not satisfiable: first > last
    """
    m = RANGE_HEADER_RX.match(value)
    if m is None:
        raise fastapi.HTTPException(412, 'Malformed Range Error')

    first = int(m['first'])
    last = int(m['last']) if m['last'] not in (None, '*') else None

    if last is not None and first > last:
        raise fastapi.HTTPException(416)

    return m['unit'], first, last


def paginate(response: fastapi.Response, pagination: Pagination, length: int) -> fastapi.Response:
    """ Report the slice in response headers: `Accept-Ranges`, `Content-Range`; set status 206

    Args:
        response: The response to modify
        pagination: The slice that was asked for
        length: The total number of items in the collection

    Raises:
        fastapi.HTTPException(416): the slice starts past the end of the collection
    """
    first: Optional[int] = pagination.offset
    last: Optional[int] = pagination.last

    # Nonexistent page
    if length > 0 and first > length - 1:
        raise fastapi.HTTPException(416)

    # Open range, or a range past the end: stop at the last item
    if last is None or last + 1 > length:
        last = length - 1

    response.headers['Accept-Ranges'] = pagination.unit
    response.headers['Content-Range'] = content_range(pagination.unit, None if length == 0 else (first, last), length)

    # Only successful responses are partial
    status_code = response.status_code or 200
    if 200 <= status_code < 300:
        response.status_code = 206

    return response


def content_range(unit: str, span: Optional[tuple[int, int]], length: Union[int, str]) -> str:
    """ Format a `Content-Range` header: "items 0-9/100", or "items */0" for an empty span """
    if span is None:
        return f'{unit} */{length}'
    else:
        return f'{unit} {span[0]}-{span[1]}/{length}'


def cursor_to_page(after: int = 0, first: int = 10) -> tuple[int, int]:
    """ Convert an offset cursor into a page number: (page, page size) """
    return after // first, first
