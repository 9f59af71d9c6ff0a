""" Integration with FastAPI: HTTP Range pagination """

from .range import RangePagination, Pagination, paginate, parse_range_header, cursor_to_page
