class BasePagerqlException(Exception):
    pass


class ConfigurationError(BasePagerqlException):
    """ The resolver or the loader is misconfigured

    Reported before any query is executed
    """


class InvalidColumnError(ConfigurationError):
    """ A column mentioned by name is not found on the SqlAlchemy model """

    def __init__(self, model: str, column_name: str, where: str):
        self.model = model
        self.column_name = column_name
        self.where = where

        super().__init__(f'Invalid column "{column_name}" for "{model}" specified in {where}')


class ParentModelRequired(ConfigurationError):
    """ A batch preset was used on a root object that is not a model instance """

    def __init__(self, root: object):
        self.root = root
        super().__init__(f'Batch fetch preset only works within a parent model, got: {type(root).__name__}')


class RelationNotFound(ConfigurationError):
    """ A relation mentioned by name is not found on the SqlAlchemy model """

    def __init__(self, model: str, relation_name: str):
        self.model = model
        self.relation_name = relation_name

        super().__init__(f'Relation "{relation_name}" not found in {model} relations')


class LoaderUnavailable(BasePagerqlException):
    """ The request context did not provide a Loader Registry

    Reported by resolvers: GraphQL puts it into the "errors" list of the response
    """

    def __init__(self, loader: object = None):
        self.loader = loader
        super().__init__('Can not get loader')
