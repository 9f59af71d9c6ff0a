""" Information about SqlAlchemy models, columns, relationships """

from . import columns, models, names, relations
