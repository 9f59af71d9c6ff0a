import os

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from pagerql.testing import created_tables, insert

from .util.models import Base, User, Profile, Article, Tag, Comment, article_tags


@pytest_asyncio.fixture()
async def engine() -> AsyncEngine:
    # In-memory SQLite only lives as long as its connection: share one
    kwargs = dict(poolclass=StaticPool) if DATABASE_URL.startswith('sqlite') else {}

    engine = create_async_engine(DATABASE_URL, **kwargs)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def connection(engine: AsyncEngine) -> AsyncConnection:
    async with engine.connect() as conn:
        async with created_tables(conn, Base.metadata):
            yield conn


@pytest_asyncio.fixture()
async def ssn(connection: AsyncConnection) -> AsyncSession:
    # Bound to the connection: sees rows that tests insert, without a commit
    async with AsyncSession(bind=connection, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture()
async def data(connection: AsyncConnection):
    """ Users, their profiles and articles; tags, comments """
    await insert(connection, User,
                 dict(id=1, name='alice'),
                 dict(id=2, name='bob'),
                 dict(id=3, name='carol'),
                 )
    await insert(connection, Profile,
                 dict(id=1, user_id=1, bio='alice bio'),
                 dict(id=2, user_id=3, bio='carol bio'),
                 )
    await insert(connection, Article,
                 dict(id=10, user_id=1, title='a1'),
                 dict(id=11, user_id=1, title='a2'),
                 dict(id=12, user_id=2, title='b1'),
                 dict(id=13, user_id=None, title='orphan'),
                 )
    await insert(connection, Tag,
                 dict(id=100, name='python'),
                 dict(id=101, name='sql'),
                 )
    await insert(connection, article_tags,
                 dict(article_id=10, tag_id=100),
                 dict(article_id=10, tag_id=101),
                 dict(article_id=12, tag_id=101),
                 )
    await insert(connection, Comment,
                 dict(id=1000, article_id=10, text='nice'),
                 dict(id=1001, article_id=12, text='meh'),
                 dict(id=1002, article_id=10, text='wow'),
                 )


# URL of the database to connect to
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite+aiosqlite:///:memory:')
