""" Query Descriptor: a pending filtered, ordered read against a model """

from __future__ import annotations

import asyncio
from collections import abc
from typing import Any, Union

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from pagerql.sainfo.columns import resolve_column_by_name
from pagerql.typing import SAModelOrAlias, SAAttribute, Record


class QueryDescriptor:
    """ A pending read: a SELECT statement with the session that will execute it

    Every method that modifies the statement returns `self`, so calls can be chained:

        rows = await QueryDescriptor.for_model(ssn, User).where(User.age > 18).limit(10)

    Awaiting the descriptor executes it.
    A descriptor is owned by the call that created it: it's not meant to be shared.
    """
    # The session (or connection) to execute the statement with
    session: Union[AsyncSession, AsyncConnection]

    # The statement
    stmt: sa.sql.Select

    # The model to resolve column names against
    target_Model: SAModelOrAlias

    # Return model instances? Otherwise, dict rows
    scalars: bool

    def __init__(self, session: Union[AsyncSession, AsyncConnection], stmt: sa.sql.Select, target_Model: SAModelOrAlias, *, scalars: bool = True):
        self.session = session
        self.stmt = stmt
        self.target_Model = target_Model
        self.scalars = scalars

    __slots__ = 'session', 'stmt', 'target_Model', 'scalars'

    @classmethod
    def for_model(cls, session: Union[AsyncSession, AsyncConnection], Model: SAModelOrAlias) -> QueryDescriptor:
        """ Select every row of a model """
        return cls(session, sa.select(Model), Model)

    def column(self, name: Union[str, SAAttribute], *, where: str = 'query') -> SAAttribute:
        """ Resolve a column by name """
        if isinstance(name, str):
            return resolve_column_by_name(name, self.target_Model, where=where)
        else:
            return name

    # region Modify the statement

    def where(self, *criteria: sa.sql.ColumnElement) -> QueryDescriptor:
        """ Add WHERE criteria, joined with AND """
        self.stmt = self.stmt.where(*criteria)
        return self

    def where_in(self, column: Union[str, SAAttribute], values: abc.Iterable[Any]) -> QueryDescriptor:
        """ Add a `column IN (values)` criterion """
        self.stmt = self.stmt.where(self.column(column, where='where_in').in_(list(values)))
        return self

    def order_by(self, *clauses: sa.sql.ColumnElement) -> QueryDescriptor:
        """ Add ORDER BY clauses """
        self.stmt = self.stmt.order_by(*clauses)
        return self

    def limit(self, limit: int) -> QueryDescriptor:
        self.stmt = self.stmt.limit(limit)
        return self

    def offset(self, offset: int) -> QueryDescriptor:
        self.stmt = self.stmt.offset(offset)
        return self

    # endregion

    # region Execute

    async def result_size(self) -> int:
        """ Count matching rows. Ignores ORDER BY, LIMIT, OFFSET """
        stmt = self.stmt.order_by(None).limit(None).offset(None)
        count_stmt = sa.select(sa.func.count()).select_from(stmt.subquery())
        async with session_lock(self.session):
            res = await self.session.execute(count_stmt)
        return res.scalar_one()

    async def fetchall(self) -> list[Record]:
        """ Execute, get the list of records """
        async with session_lock(self.session):
            res = await self.session.execute(self.stmt)

        # Model instances, or dict rows
        # We use `.mappings()` to convert a list of rows `list[RowMapping]` into a list of dicts `list[dict]`
        if self.scalars:
            return list(res.scalars().all())
        else:
            return [dict(row) for row in res.mappings()]

    def __await__(self):
        return self.fetchall().__await__()

    # endregion

    def __repr__(self):
        return f'<{type(self).__name__}: {self.stmt}>'


def session_lock(session: Union[AsyncSession, AsyncConnection]) -> asyncio.Lock:
    """ Get the lock that makes statements on one session run one at a time

    Batches for unrelated relations may be dispatched concurrently, but a session cannot run concurrent statements.
    """
    return session.info.setdefault('pagerql.lock', asyncio.Lock())
