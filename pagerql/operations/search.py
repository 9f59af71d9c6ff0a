""" Keyword search across several columns """

from __future__ import annotations

from collections import abc
from typing import Optional

import sqlalchemy as sa

from pagerql.query import QueryDescriptor


def apply_keyword_search(query: QueryDescriptor, searchable: Optional[abc.Sequence[str]], keyword: Optional[str]) -> QueryDescriptor:
    """ Case-insensitive pattern match of `keyword` against any of the `searchable` columns

    Example:
        WHERE lower(name) LIKE '%' || lower('keyword') || '%' OR lower(description) LIKE ...

    Wildcards in the keyword are escaped: "%" and "_" are matched literally
    """
    if not searchable or not keyword:
        return query

    return query.where(sa.or_(*(
        query.column(name, where='searchable').icontains(keyword, autoescape=True)
        for name in searchable
    )))
