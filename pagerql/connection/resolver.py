""" Connection Resolver: a GraphQL resolver that paginates a query """

from __future__ import annotations

import logging
from typing import Any, Optional

import graphql

from pagerql.features.cursor import CursorImplementation, KeysetCursor, OffsetCursor
from pagerql.operations import resolve_ordering, filter_strategies, apply_filters, apply_keyword_search
from pagerql.query import QueryDescriptor
from pagerql.typing import Context, Record

from .relay import relay_result, ConnectionDict
from .request import PageRequest
from .settings import ConnectionSettings


logger = logging.getLogger(__name__)


class ConnectionResolver:
    """ Resolve a paginated list: keyset or offset pagination, Relay format

    The object is a graphql-core resolver: resolve(root, info, **arguments).

    Example:
        users_field = graphql.GraphQLField(
            UserConnection,
            args={'first': ..., 'after': ..., 'orderBy': ...},
            resolve=ConnectionResolver(ConnectionSettings(model=User, sortable=['name'])),
        )

    Steps:
    1. Decide on the ordering: `orderBy`, or the default cursor column
    2. Apply `filterBy` and `keyword`
    3. Count matching rows
    4. Position the window after the cursor, load `first + 1` rows
    5. Sort, NULLS LAST
    6. Make edges, cursors, page info
    """
    settings: ConnectionSettings

    def __init__(self, settings: Optional[ConnectionSettings] = None, **options):
        """
        Args:
            settings: Resolver settings
            **options: Settings fields, if `settings` object is not given
        """
        self.settings = settings or ConnectionSettings(**options)

        # Prepare filters once
        self.filters = filter_strategies(self.settings.filterable)

    async def __call__(self, root: Optional[Record], info: graphql.GraphQLResolveInfo, **arguments: Any) -> ConnectionDict:
        return await self.resolve(root, PageRequest.from_arguments(arguments), info.context)

    async def resolve(self, parent: Optional[Record], request: PageRequest, context: Context, *, query: Optional[QueryDescriptor] = None) -> ConnectionDict:
        """ Load a page

        Args:
            parent: The parent object. Is given to the query factory
            request: The page request
            context: The request context
            query: A prepared query to use instead of the one from the query factory

        Raises:
            exc.ConfigurationError: no ordering could be resolved, or invalid columns configured
        """
        settings = self.settings
        first = settings.get_final_limit(request.first)
        cursor_columns = settings.cursor_columns

        # 1. Ordering
        # Fails before any query is made
        ordering = resolve_ordering(request.order_by, settings.sortable, cursor_columns, keyset=not settings.use_offset)
        cursor_impl = self.make_cursor_impl(ordering, cursor_columns)
        logger.debug('Connection: %s pagination, first=%d, ordering=%r', cursor_impl.name, first, ordering)

        # The query. Resolve ordering columns early: fail on invalid names before anything is executed
        if query is None:
            query = settings.make_query(context, parent)
        order_clauses = [field.compile(query) for field in ordering]

        # 2. Filter, search
        query = apply_filters(query, self.filters, request.filter_by)
        query = apply_keyword_search(query, settings.searchable, request.keyword)

        # 3. Count
        total = await query.result_size()

        # 4. Pagination window
        cursor = cursor_impl.decode_cursor(request.after)
        query = cursor_impl.apply_to_query(query, cursor, first)

        # 5. Ordering
        query = query.order_by(*order_clauses)

        # 6. Results
        nodes = await query.fetchall()
        return relay_result(
            nodes,
            first=first,
            total=total,
            cursor_for=lambda node, index: cursor_impl.generate_cursor(node, index, cursor),
        )

    def make_cursor_impl(self, ordering, cursor_columns: tuple[str, ...]) -> CursorImplementation:
        """ Choose the pagination strategy """
        if self.settings.use_offset:
            return OffsetCursor(ordering, cursor_columns)
        else:
            return KeysetCursor(ordering, cursor_columns)


def connection_resolver(**options) -> ConnectionResolver:
    """ Make a Connection Resolver with the given settings

    Example:
        resolve = connection_resolver(model=User, sortable=['name'], cursor_column=['created_at', 'id'])
    """
    return ConnectionResolver(ConnectionSettings(**options))
