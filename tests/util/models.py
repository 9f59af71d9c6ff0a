import sqlalchemy as sa
import sqlalchemy.orm


Base = sa.orm.declarative_base()


class ManyFieldsMixin:
    """ A mixin with many columns """
    a = sa.Column(sa.String)
    b = sa.Column(sa.String)
    c = sa.Column(sa.String)


def manyfields(prefix: str, n: int):
    """ Make a dict for a ManyFields object

    Example:
        Item(
            id=1,
            **manyfields('item', 1),
        )
        => Item(id=1, a='item-1-a', b='item-1-b', c='item-1-c')
    """
    return {
        k: f'{prefix}-{n}-{k}'
        for k in 'abc'
    }


def id_manyfields(prefix: str, id: int, **extra):
    """ Make a dict for a ManyFields object that also has an id

    Example:
        Item(**id_manyfields('item', 1, value=10))
        => Item(id=1, a='item-1-a', b='item-1-b', c='item-1-c', value=10)
    """
    return {
        'id': id,
        **manyfields(prefix, id),
        **extra
    }


class Item(ManyFieldsMixin, Base):
    """ A model to paginate """
    __tablename__ = 'items'

    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.String)
    value = sa.Column(sa.Integer, nullable=True)
    created_at = sa.Column(sa.DateTime, nullable=True)


# region Relations

article_tags = sa.Table(
    'article_tags', Base.metadata,
    sa.Column('article_id', sa.ForeignKey('articles.id'), primary_key=True),
    sa.Column('tag_id', sa.ForeignKey('tags.id'), primary_key=True),
)


class User(Base):
    __tablename__ = 'users'

    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.String)

    articles = sa.orm.relationship('Article', back_populates='author')
    profile = sa.orm.relationship('Profile', back_populates='user', uselist=False)


class Profile(Base):
    __tablename__ = 'profiles'

    id = sa.Column(sa.Integer, primary_key=True)
    user_id = sa.Column(sa.ForeignKey(User.id))
    bio = sa.Column(sa.String)

    user = sa.orm.relationship(User, back_populates='profile')


class Article(Base):
    __tablename__ = 'articles'

    id = sa.Column(sa.Integer, primary_key=True)
    user_id = sa.Column(sa.ForeignKey(User.id), nullable=True)
    title = sa.Column(sa.String)

    author = sa.orm.relationship(User, back_populates='articles')
    tags = sa.orm.relationship('Tag', secondary=article_tags)


class Tag(Base):
    __tablename__ = 'tags'

    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.String)


class Comment(Base):
    """ No relationships declared: keys come from naming conventions """
    __tablename__ = 'comments'

    id = sa.Column(sa.Integer, primary_key=True)
    article_id = sa.Column(sa.Integer)
    text = sa.Column(sa.String)

# endregion
