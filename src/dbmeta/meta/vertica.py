"""
Vertica-specific meta model.

Vertica exposes its catalog through the ``v_catalog`` system schema rather
than standard metadata, so this adapter supplies its own queries for:
- Table enumeration, unifying regular/flex tables and views with comments
- Object DDL through the native EXPORT_OBJECTS function
- Function source from ``v_catalog.user_functions``
- Sequences with their current value, bounds and increment
- Row limiting by rewriting the query instead of wrapping it

Schemas whose name starts with ``v_`` are Vertica's own system schemas.
They follow the standard metadata shape, so enumeration there is left to
the generic behavior.
"""
import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dbmeta.exceptions import MetadataAccessError
from dbmeta.meta.base import MetaModel, register_meta_model
from dbmeta.model import DataSource, Procedure, Schema, Sequence, Table
from dbmeta.model import TableColumn, TableKind
from dbmeta.outcome import USE_DEFAULT, Custom, Outcome
from dbmeta.session import MetaSession, PreparedStatement, open_meta_session
from dbmeta.session import safe_get_long, safe_get_string
from dbmeta.transform import QueryTransformer, QueryTransformerLimit
from dbmeta.transform import QueryTransformType
from sqlalchemy.exc import SQLAlchemyError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from dbmeta.options import DataSourceOptions

logger = logging.getLogger(__name__)

SYSTEM_SCHEMA_PREFIX = 'v_'

_TABLE_LOAD_SQL = """
SELECT tv.*, c.comment AS REMARKS FROM (
SELECT NULL AS TABLE_CAT, t.table_schema AS TABLE_SCHEM, t.table_name AS TABLE_NAME,
    (CASE t.is_flextable WHEN true THEN 'FLEXTABLE' ELSE 'TABLE' END) AS TABLE_TYPE, NULL AS TYPE_CAT,
    t.owner_name, t.table_definition AS DEFINITION
FROM v_catalog.tables t
UNION ALL
SELECT NULL AS TABLE_CAT, v.table_schema AS TABLE_SCHEM, v.table_name AS TABLE_NAME, 'VIEW' AS TABLE_TYPE, NULL AS TYPE_CAT,
    v.owner_name, v.view_definition AS DEFINITION
FROM v_catalog.views v) tv
LEFT OUTER JOIN v_catalog.comments c
    ON c.object_type = tv.TABLE_TYPE AND c.object_schema = tv.TABLE_SCHEM AND c.object_name = tv.TABLE_NAME
WHERE tv.TABLE_SCHEM = ?{name_filter}
ORDER BY 2, 3
"""

_PROCEDURE_SOURCE_SQL = """
SELECT function_definition FROM v_catalog.user_functions WHERE schema_name = ? AND function_name = ?
"""

_SEQUENCES_SQL = """
SELECT * FROM v_catalog.sequences WHERE sequence_schema = ? ORDER BY sequence_name
"""

_EXPORT_OBJECTS_SQL = """
SELECT EXPORT_OBJECTS('', ?, false) AS ddl
"""

_CHAR_TYPES = {'char', 'varchar', 'long varchar', 'binary', 'varbinary', 'long varbinary'}
_NUMERIC_TYPES = {'numeric', 'decimal', 'number', 'money'}
_TYPE_MODIFIERS = re.compile(r'\s*\(.*\)\s*$')


def is_system_schema(name: str) -> bool:
    """Check if a schema is one of Vertica's own catalog schemas."""
    return name.startswith(SYSTEM_SCHEMA_PREFIX)


def build_table_load_sql(with_name_filter: bool) -> str:
    """Table enumeration query for one schema.

    The first parameter is the schema name. With `with_name_filter` a
    second parameter restricts the table name with LIKE.
    """
    name_filter = ' AND tv.TABLE_NAME LIKE ?' if with_name_filter else ''
    return _TABLE_LOAD_SQL.format(name_filter=name_filter)


class VerticaDataSource(DataSource):
    """Vertica data source."""


class VerticaSchema(Schema):

    @property
    def is_system(self) -> bool:
        return is_system_schema(self.name)


class VerticaTable(Table):
    """Regular table, flex table or view read from the Vertica catalog.
    """

    def __init__(self, container: Schema, name: str, kind: TableKind,
                 row: Mapping[str, Any] | None = None, **kw: Any) -> None:
        if row is not None:
            kw.setdefault('owner', safe_get_string(row, 'owner_name'))
            kw.setdefault('definition', safe_get_string(row, 'DEFINITION'))
            kw.setdefault('remarks', safe_get_string(row, 'REMARKS'))
        super().__init__(container, name, kind, **kw)

    @property
    def is_flex_table(self) -> bool:
        return self.kind is TableKind.FLEXTABLE


class VerticaTableColumn(TableColumn):
    """Column with Vertica type name handling.

    `type_name` is kept exactly as reported; `base_type_name` drops type
    modifiers and `full_type_name` restores them from the column sizes.
    """

    @property
    def base_type_name(self) -> str | None:
        if self.type_name is None:
            return None
        return _TYPE_MODIFIERS.sub('', self.type_name).lower()

    @property
    def full_type_name(self) -> str | None:
        if self.type_name is None or '(' in self.type_name:
            return self.type_name
        base = self.base_type_name
        if base in _CHAR_TYPES and self.char_length:
            return f'{self.type_name}({self.char_length})'
        if base in _NUMERIC_TYPES and self.precision is not None:
            return f'{self.type_name}({self.precision},{self.scale or 0})'
        return self.type_name


def get_object_ddl(table: Table) -> str:
    """Ask Vertica to export the definition of a catalog object.
    """
    data_source = table.data_source
    preparer = data_source.engine.dialect.identifier_preparer
    object_name = f'{preparer.quote_schema(table.container.name)}.{preparer.quote(table.name)}'
    try:
        with open_meta_session(data_source, 'Read Vertica object DDL') as session:
            with session.prepare_statement(_EXPORT_OBJECTS_SQL) as stmt:
                stmt.set_string(1, object_name)
                with stmt.execute_query() as result:
                    return ''.join(safe_get_string(row, 'ddl') or '' for row in result)
    except SQLAlchemyError as e:
        raise MetadataAccessError(e, data_source, _EXPORT_OBJECTS_SQL) from e


@register_meta_model('vertica')
class VerticaMetaModel(MetaModel):
    """Vertica catalog adapter.
    """

    def create_data_source_impl(self, name: str, engine: 'Engine',
                                options: 'DataSourceOptions | None' = None) -> Outcome[DataSource]:
        return Custom(VerticaDataSource(name, engine, self, options))

    def create_schema_impl(self, data_source: DataSource, catalog: str | None,
                           schema_name: str) -> Outcome[Schema]:
        return Custom(VerticaSchema(data_source, catalog, schema_name))

    def prepare_table_load_statement(self, session: MetaSession, owner: Schema,
                                     obj: Table | None = None,
                                     object_name: str | None = None) -> Outcome[PreparedStatement]:
        if is_system_schema(owner.name):
            logger.debug(f'System schema {owner.name}, using standard table enumeration')
            return USE_DEFAULT
        with_name_filter = obj is not None or object_name is not None
        stmt = session.prepare_statement(build_table_load_sql(with_name_filter))
        stmt.set_string(1, owner.name)
        if with_name_filter:
            stmt.set_string(2, obj.name if obj is not None else object_name)
        return Custom(stmt)

    def create_table_impl(self, container: Schema, table_name: str, table_type: str,
                          row: Mapping[str, Any]) -> Outcome[Table]:
        return Custom(VerticaTable(container, table_name, TableKind.from_tag(table_type), row))

    def create_table_column_impl(self, table: Table, column_name: str, type_name: str | None,
                                 value_type: int, source_type: int, ordinal_pos: int,
                                 column_size: int | None, char_length: int | None,
                                 scale: int | None, precision: int | None, radix: int | None,
                                 not_null: bool, remarks: str | None, default_value: str | None,
                                 auto_increment: bool, auto_generated: bool) -> Outcome[TableColumn]:
        return Custom(VerticaTableColumn(
            table,
            column_name,
            type_name, value_type, source_type, ordinal_pos,
            column_size,
            char_length, scale, precision, radix, not_null,
            remarks, default_value, auto_increment, auto_generated
            ))

    def get_table_ddl(self, table: Table, options: dict[str, Any]) -> Outcome[str]:
        if table.is_persisted:
            return Custom(get_object_ddl(table))
        return USE_DEFAULT

    def get_view_ddl(self, table: Table, options: dict[str, Any]) -> Outcome[str]:
        # Vertica has no separate view DDL path in its catalog
        return self.get_table_ddl(table, options)

    def get_procedure_ddl(self, procedure: Procedure) -> Outcome[str]:
        data_source = procedure.data_source
        try:
            with open_meta_session(data_source, 'Read Vertica procedure source') as session:
                with session.prepare_statement(_PROCEDURE_SOURCE_SQL) as stmt:
                    stmt.set_string(1, procedure.schema.name)
                    stmt.set_string(2, procedure.name)
                    with stmt.execute_query() as result:
                        fragments = [safe_get_string(row, 'function_definition') or '' for row in result]
        except SQLAlchemyError as e:
            raise MetadataAccessError(e, data_source, _PROCEDURE_SOURCE_SQL) from e
        return Custom(''.join(fragments))

    def supports_sequences(self, data_source: DataSource) -> Outcome[bool]:
        return Custom(True)

    def load_sequences(self, container: Schema) -> Outcome[list[Sequence]]:
        data_source = container.data_source
        result: list[Sequence] = []
        try:
            with open_meta_session(data_source, 'Read system sequences') as session:
                with session.prepare_statement(_SEQUENCES_SQL) as stmt:
                    stmt.set_string(1, container.name)
                    with stmt.execute_query() as rows:
                        for row in rows:
                            name = safe_get_string(row, 'sequence_name')
                            if name is None:
                                logger.debug(f'Skipping sequence without name in {container.name}')
                                continue
                            result.append(Sequence(
                                container,
                                name.strip(),
                                None,
                                safe_get_long(row, 'current_value'),
                                safe_get_long(row, 'minimum'),
                                safe_get_long(row, 'maximum'),
                                safe_get_long(row, 'increment_by'),
                                ))
        except SQLAlchemyError as e:
            raise MetadataAccessError(e, data_source, _SEQUENCES_SQL) from e
        return Custom(result)

    def create_query_transformer(self, transform_type: QueryTransformType) -> Outcome[QueryTransformer | None]:
        if transform_type is QueryTransformType.RESULT_SET_LIMIT:
            return Custom(QueryTransformerLimit(wrap=False))
        return Custom(None)
