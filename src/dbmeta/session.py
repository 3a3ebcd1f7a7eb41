"""
Scoped metadata sessions over SQLAlchemy connections.

A metadata session is a short-lived connection tagged with a human-readable
purpose. Catalog statements are prepared with positional ``?`` parameters,
executed once and read through a forward-only result set whose rows are
looked up by column name regardless of the case the driver reports.

    with open_meta_session(data_source, 'Read sequences') as session:
        with session.prepare_statement(sql) as stmt:
            stmt.set_string(1, schema_name)
            with stmt.execute_query() as result:
                for row in result:
                    name = safe_get_string(row, 'sequence_name')

The connection is returned on every exit path, including errors raised
while iterating.
"""
import logging
import time
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from dbmeta.sql import bind_positional

from libb import is_null

if TYPE_CHECKING:
    from dbmeta.model import DataSource

logger = logging.getLogger(__name__)


class MetaRow(Mapping):
    """Result row with case-insensitive column lookup."""

    __slots__ = ('_data',)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = {str(k).lower(): v for k, v in data.items()}

    def __getitem__(self, key: str) -> Any:
        return self._data[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f'MetaRow({self._data!r})'


def safe_get_value(row: Mapping[str, Any], name: str) -> Any | None:
    """Get a column value, None when the column is absent or NULL."""
    try:
        value = row[name]
    except KeyError:
        return None
    if is_null(value):
        return None
    return value


def safe_get_string(row: Mapping[str, Any], name: str) -> str | None:
    """Get a column value as text, None when absent or NULL."""
    value = safe_get_value(row, name)
    if value is None:
        return None
    return str(value)


def safe_get_long(row: Mapping[str, Any], name: str) -> int | None:
    """Get a column value as an integer, None when absent, NULL or not numeric.
    """
    value = safe_get_value(row, name)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug(f'Column {name} holds non-integer value {value!r}')
        return None


class ResultSet:
    """Forward-only iteration over result rows.
    """

    def __init__(self, rows: Iterable[Mapping[str, Any]],
                 on_close: Callable[[], None] | None = None) -> None:
        self._rows = iter(rows)
        self._on_close = on_close
        self._closed = False
        self.row_count = 0

    def __iter__(self) -> Iterator[MetaRow]:
        return self

    def __next__(self) -> MetaRow:
        if self._closed:
            raise StopIteration
        row = next(self._rows)
        self.row_count += 1
        return MetaRow(row)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> 'ResultSet':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class PreparedStatement:
    """Catalog statement with 1-based positional parameters.
    """

    def __init__(self, session: 'MetaSession', sql: str) -> None:
        self.session = session
        self.sql = sql
        self._text, self._names = bind_positional(sql)
        self._params: dict[str, Any] = {}

    @property
    def parameter_count(self) -> int:
        return len(self._names)

    def set_string(self, index: int, value: str | None) -> None:
        self.set_parameter(index, value)

    def set_parameter(self, index: int, value: Any) -> None:
        """Bind a value to the placeholder at 1-based `index`.

        Raises
            IndexError: If the statement has no such placeholder
        """
        if not 1 <= index <= len(self._names):
            raise IndexError(f'Parameter index {index} out of range (1..{len(self._names)})')
        self._params[self._names[index - 1]] = value

    @property
    def parameters(self) -> list[Any]:
        return [self._params.get(name) for name in self._names]

    def execute_query(self) -> ResultSet:
        """Execute the statement and return its result set."""
        start = time.time()
        logger.debug(f'SQL [{self.session.purpose}]:\n{self.sql}\nargs: {self.parameters}')
        try:
            result = self.session.connection.execute(sa.text(self._text), self._params)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{self.sql}\nargs: {self.parameters}')
            raise
        finally:
            logger.debug(f'Query time: {time.time() - start:.4f}s')
        if not result.returns_rows:
            result.close()
            return ResultSet(())
        return ResultSet(result.mappings(), on_close=result.close)

    def close(self) -> None:
        self._params.clear()

    def __enter__(self) -> 'PreparedStatement':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class MetaSession:
    """Connection scoped to one metadata request.
    """

    def __init__(self, data_source: 'DataSource', connection: sa.Connection,
                 purpose: str) -> None:
        self.data_source = data_source
        self.connection = connection
        self.purpose = purpose

    def prepare_statement(self, sql: str) -> PreparedStatement:
        return PreparedStatement(self, sql)

    @property
    def inspector(self) -> sa.Inspector:
        # Bound to the connection so uncommitted catalog changes are visible
        return sa.inspect(self.connection)


@contextmanager
def open_meta_session(data_source: 'DataSource', purpose: str) -> Iterator[MetaSession]:
    """Open a metadata session, returning the connection on every exit path.
    """
    logger.debug(f'Open meta session [{purpose}] on {data_source.name}')
    connection = data_source.engine.connect()
    try:
        yield MetaSession(data_source, connection, purpose)
    finally:
        connection.close()
        logger.debug(f'Closed meta session [{purpose}] on {data_source.name}')
