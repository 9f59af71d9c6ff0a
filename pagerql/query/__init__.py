from .descriptor import QueryDescriptor
