"""
Introspection entry points.

The introspector is what a host calls to read a data source's catalog. For
every operation it asks the data source's meta model first; when the model
answers ``USE_DEFAULT`` the generic implementation runs instead.

All catalog failures surface as ``MetadataAccessError`` scoped to the data
source. Nothing here retries: a failed pass returns no entities and leaves
the cache untouched, and the caller decides whether to run it again.
"""
import logging
from typing import TYPE_CHECKING, Any

from dbmeta.cache import Cache, cacheable_introspection
from dbmeta.exceptions import MetadataAccessError
from dbmeta.meta.base import MetaModel
from dbmeta.meta.generic import GenericMetaModel
from dbmeta.model import DataSource, Procedure, Schema, Sequence, Table
from dbmeta.model import TableColumn
from dbmeta.outcome import USE_DEFAULT, Custom
from dbmeta.session import open_meta_session, safe_get_string
from sqlalchemy.exc import SQLAlchemyError

if TYPE_CHECKING:
    from dbmeta.transform import QueryTransformer, QueryTransformType

logger = logging.getLogger(__name__)

_GENERIC = GenericMetaModel()


def dispatch(meta_model: MetaModel, operation: str, *args: Any, **kwargs: Any) -> Any:
    """Run a meta model hook, falling back to the generic implementation.
    """
    outcome = getattr(meta_model, operation)(*args, **kwargs)
    if isinstance(outcome, Custom):
        return outcome.value
    if outcome is not USE_DEFAULT:
        raise TypeError(f'{type(meta_model).__name__}.{operation} returned {outcome!r}, '
                        'expected Custom(...) or USE_DEFAULT')
    logger.debug(f'{meta_model.name}: {operation} uses the generic implementation')
    return getattr(_GENERIC, operation)(*args, **kwargs)


class Introspector:
    """Catalog reader for one data source.
    """

    def __init__(self, data_source: DataSource) -> None:
        self.data_source = data_source
        self.meta_model = data_source.meta_model

    def _dispatch(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        return dispatch(self.meta_model, operation, *args, **kwargs)

    def create_schema(self, name: str, catalog: str | None = None) -> Schema:
        return self._dispatch('create_schema_impl', self.data_source, catalog, name)

    def refresh(self) -> None:
        """Forget cached enumerations of this data source."""
        Cache.get_instance().clear_for_data_source(self.data_source)
        logger.debug(f'Cleared cached catalog of {self.data_source.name}')

    @cacheable_introspection('tables', ttl=300, maxsize=50)
    def list_tables(self, container: Schema, name: str | None = None,
                    obj: Table | None = None) -> list[Table]:
        """Enumerate tables and views of a container.

        Args:
            container: Schema to enumerate
            name: Optional table name filter
            obj: Optional table whose name is used as filter; wins over `name`
            bypass_cache: If True, read the catalog even if a cached result exists

        Returns
            Tables in catalog order
        """
        tables = []
        stmt = None
        try:
            with open_meta_session(self.data_source, f'Load tables of {container.name}') as session:
                stmt = self._dispatch('prepare_table_load_statement', session, container, obj, name)
                try:
                    with stmt.execute_query() as result:
                        for row in result:
                            table_name = safe_get_string(row, 'TABLE_NAME')
                            if table_name is None:
                                continue
                            table_type = safe_get_string(row, 'TABLE_TYPE')
                            tables.append(self._dispatch('create_table_impl', container,
                                                         table_name, table_type, row))
                finally:
                    if hasattr(stmt, 'close'):
                        stmt.close()
        except (SQLAlchemyError, ValueError) as e:
            raise MetadataAccessError(e, self.data_source, getattr(stmt, 'sql', None)) from e
        logger.debug(f'Loaded {len(tables)} tables from {container.name}')
        return tables

    def create_table_column(self, table: Table, **attributes: Any) -> TableColumn:
        """Construct a column from decoded attributes (see ``MetaModel.create_table_column_impl``).
        """
        return self._dispatch('create_table_column_impl', table, **attributes)

    def load_columns(self, table: Table) -> list[TableColumn]:
        """Populate a persisted table's columns from the catalog.
        """
        if not table.is_persisted:
            return table.columns
        try:
            with open_meta_session(self.data_source, f'Load columns of {table.full_name}') as session:
                attributes = _GENERIC.read_column_attributes(session, table)
        except SQLAlchemyError as e:
            raise MetadataAccessError(e, self.data_source) from e
        columns = [self.create_table_column(table, **attrs) for attrs in attributes]
        table.columns = []
        for column in columns:
            table.add_column(column)
        return table.columns

    def get_table_ddl(self, table: Table, options: dict[str, Any] | None = None) -> str:
        return self._ddl('get_table_ddl', table, options)

    def get_view_ddl(self, table: Table, options: dict[str, Any] | None = None) -> str:
        return self._ddl('get_view_ddl', table, options)

    def get_ddl(self, table: Table, options: dict[str, Any] | None = None) -> str:
        """Definition text of a table or view, by its kind."""
        if table.is_view:
            return self.get_view_ddl(table, options)
        return self.get_table_ddl(table, options)

    def _ddl(self, operation: str, table: Table, options: dict[str, Any] | None) -> str:
        try:
            return self._dispatch(operation, table, dict(options or {}))
        except SQLAlchemyError as e:
            raise MetadataAccessError(e, self.data_source) from e

    def get_procedure_ddl(self, procedure: Procedure) -> str:
        """Source text of a function or procedure, empty if the catalog has none.
        """
        source = self._dispatch('get_procedure_ddl', procedure)
        procedure.definition = source
        return source

    def supports_sequences(self) -> bool:
        return self._dispatch('supports_sequences', self.data_source)

    @cacheable_introspection('sequences', ttl=300, maxsize=50)
    def load_sequences(self, container: Schema) -> list[Sequence]:
        """Enumerate sequences of a container, in catalog order.
        """
        if not self.supports_sequences():
            return []
        return self._dispatch('load_sequences', container)

    def create_query_transformer(self, transform_type: 'QueryTransformType') -> 'QueryTransformer | None':
        """Query transformer of the requested type, None when unavailable."""
        return self._dispatch('create_query_transformer', transform_type)
