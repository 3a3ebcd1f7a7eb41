"""
Query transformers requested by the introspection layer.
"""
import logging
from enum import Enum

from dbmeta.sql import first_keyword, has_outer_limit, strip_statement

logger = logging.getLogger(__name__)


class QueryTransformType(Enum):
    """Kinds of query rewrites a caller may ask an adapter for."""
    RESULT_SET_LIMIT = 'result_set_limit'
    RESULT_SET_COUNT = 'result_set_count'
    ORDER_BY = 'order_by'


class QueryTransformer:
    """Base class for query rewrites."""

    transform_type: QueryTransformType

    def transform(self, sql: str, offset: int = 0, length: int | None = None) -> str:
        raise NotImplementedError


class QueryTransformerLimit(QueryTransformer):
    """Restrict a SELECT to a window of rows.

    In non-wrapping mode the LIMIT/OFFSET clause is appended to the query
    text itself. A query that already carries its own outer LIMIT cannot be
    rewritten that way and is wrapped in a subquery instead.
    """

    transform_type = QueryTransformType.RESULT_SET_LIMIT

    def __init__(self, wrap: bool = True) -> None:
        self.wrap = wrap

    def transform(self, sql: str, offset: int = 0, length: int | None = None) -> str:
        if first_keyword(sql) not in {'SELECT', 'WITH'}:
            logger.debug('Not a SELECT statement, limit not applied')
            return sql
        if offset < 0:
            raise ValueError(f'offset must not be negative: {offset}')
        if length is not None and length < 0:
            raise ValueError(f'length must not be negative: {length}')

        query = strip_statement(sql)
        clause = self._limit_clause(offset, length)
        if not clause:
            return query
        if self.wrap or has_outer_limit(query):
            return f'SELECT * FROM ({query}) _lim{clause}'
        return f'{query}{clause}'

    @staticmethod
    def _limit_clause(offset: int, length: int | None) -> str:
        clause = ''
        if length is not None:
            clause += f' LIMIT {length}'
        if offset:
            clause += f' OFFSET {offset}'
        return clause

    def __repr__(self) -> str:
        return f'QueryTransformerLimit(wrap={self.wrap})'
