"""
Engine-agnostic catalog behavior.

This is what the introspector runs whenever an adapter answers
``USE_DEFAULT``. It relies on the SQLAlchemy Inspector for standard
catalog queries and on SQLAlchemy DDL compilation for definitions of
objects that do not exist in the database yet.
"""
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from dbmeta.exceptions import MetadataAccessError
from dbmeta.meta import get_meta_model
from dbmeta.model import DataSource, Procedure, Schema, Sequence, Table
from dbmeta.model import TableColumn, TableKind
from dbmeta.session import ResultSet, open_meta_session, safe_get_string
from dbmeta.sql import like_match
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from dbmeta.options import DataSourceOptions
    from dbmeta.session import MetaSession
    from dbmeta.transform import QueryTransformer, QueryTransformType

logger = logging.getLogger(__name__)

# java.sql.Types codes, the de-facto generic value type codes
TYPE_SMALLINT = 5
TYPE_INTEGER = 4
TYPE_BIGINT = -5
TYPE_FLOAT = 6
TYPE_NUMERIC = 2
TYPE_VARCHAR = 12
TYPE_LONGVARCHAR = -1
TYPE_DATE = 91
TYPE_TIME = 92
TYPE_TIMESTAMP = 93
TYPE_VARBINARY = -3
TYPE_BOOLEAN = 16
TYPE_OTHER = 1111

# Order matters: subclasses before their bases
_TYPE_CODES: list[tuple[type, int]] = [
    (sa.Boolean, TYPE_BOOLEAN),
    (sa.BigInteger, TYPE_BIGINT),
    (sa.SmallInteger, TYPE_SMALLINT),
    (sa.Integer, TYPE_INTEGER),
    (sa.Float, TYPE_FLOAT),
    (sa.Numeric, TYPE_NUMERIC),
    (sa.Text, TYPE_LONGVARCHAR),
    (sa.String, TYPE_VARCHAR),
    (sa.DateTime, TYPE_TIMESTAMP),
    (sa.Date, TYPE_DATE),
    (sa.Time, TYPE_TIME),
    (sa.LargeBinary, TYPE_VARBINARY),
]


def generic_type_code(type_: Any) -> int:
    """Map a SQLAlchemy type instance to a generic value type code."""
    for cls, code in _TYPE_CODES:
        if isinstance(type_, cls):
            return code
    return TYPE_OTHER


class _DeclaredType(sa.types.UserDefinedType):
    """Renders a column type exactly as declared in the catalog."""

    cache_ok = True

    def __init__(self, spec: str) -> None:
        self.spec = spec

    def get_col_spec(self, **kw: Any) -> str:
        return self.spec


def _column_type_spec(column: TableColumn) -> str:
    spec = getattr(column, 'full_type_name', None) or column.type_name
    return spec or 'VARCHAR'


class InspectorTableStatement:
    """Table enumeration through the SQLAlchemy Inspector.

    Produces rows shaped like a standard catalog listing: ``TABLE_CAT``,
    ``TABLE_SCHEM``, ``TABLE_NAME``, ``TABLE_TYPE``, ``REMARKS`` and, for
    views, ``DEFINITION``. `name_pattern` uses LIKE syntax.
    """

    def __init__(self, session: 'MetaSession', owner: Schema,
                 name_pattern: str | None = None) -> None:
        self.session = session
        self.owner = owner
        self.name_pattern = name_pattern

    def execute_query(self) -> ResultSet:
        inspector = self.session.inspector
        schema = self.owner.name
        supports_comments = bool(getattr(inspector.dialect, 'supports_comments', False))

        entries = [(name, TableKind.TABLE) for name in inspector.get_table_names(schema=schema)]
        entries += [(name, TableKind.VIEW) for name in inspector.get_view_names(schema=schema)]
        if self.name_pattern is not None:
            entries = [e for e in entries if like_match(e[0], self.name_pattern)]

        rows = []
        for name, kind in sorted(entries, key=lambda e: e[0]):
            row = {
                'TABLE_CAT': None,
                'TABLE_SCHEM': schema,
                'TABLE_NAME': name,
                'TABLE_TYPE': kind.value,
                'REMARKS': None,
                'DEFINITION': None,
                }
            if supports_comments:
                row['REMARKS'] = inspector.get_table_comment(name, schema=schema).get('text')
            if kind is TableKind.VIEW:
                row['DEFINITION'] = inspector.get_view_definition(name, schema=schema)
            rows.append(row)
        logger.debug(f'Inspector listed {len(rows)} tables in {schema}')
        return ResultSet(rows)


class GenericMetaModel:
    """Default implementation of every meta model operation.
    """

    def create_data_source_impl(self, name: str, engine: 'Engine',
                                options: 'DataSourceOptions | None' = None) -> DataSource:
        meta_model = get_meta_model(options.meta_model if options else 'generic')
        return DataSource(name, engine, meta_model, options)

    def create_schema_impl(self, data_source: DataSource, catalog: str | None,
                           schema_name: str) -> Schema:
        return Schema(data_source, catalog, schema_name)

    def prepare_table_load_statement(self, session: 'MetaSession', owner: Schema,
                                     obj: Table | None = None,
                                     object_name: str | None = None) -> InspectorTableStatement:
        pattern = obj.name if obj is not None else object_name
        return InspectorTableStatement(session, owner, pattern)

    def create_table_impl(self, container: Schema, table_name: str, table_type: str,
                          row: Mapping[str, Any]) -> Table:
        return Table(container, table_name, TableKind.from_tag(table_type),
                     definition=safe_get_string(row, 'DEFINITION'),
                     remarks=safe_get_string(row, 'REMARKS'))

    def create_table_column_impl(self, table: Table, column_name: str, type_name: str | None,
                                 value_type: int, source_type: int, ordinal_pos: int,
                                 column_size: int | None, char_length: int | None,
                                 scale: int | None, precision: int | None, radix: int | None,
                                 not_null: bool, remarks: str | None, default_value: str | None,
                                 auto_increment: bool, auto_generated: bool) -> TableColumn:
        return TableColumn(table, column_name, type_name, value_type, source_type, ordinal_pos,
                           column_size, char_length, scale, precision, radix, not_null,
                           remarks, default_value, auto_increment, auto_generated)

    def read_column_attributes(self, session: 'MetaSession', table: Table) -> list[dict[str, Any]]:
        """Decode column descriptions of a persisted table, in ordinal order.
        """
        attributes = []
        columns = session.inspector.get_columns(table.name, schema=table.container.name)
        for position, col in enumerate(columns, start=1):
            type_ = col['type']
            code = generic_type_code(type_)
            length = getattr(type_, 'length', None)
            autoincrement = col.get('autoincrement')
            attributes.append({
                'column_name': col['name'],
                'type_name': type_.compile(dialect=session.connection.dialect),
                'value_type': code,
                'source_type': code,
                'ordinal_pos': position,
                'column_size': length if length is not None else getattr(type_, 'precision', None),
                'char_length': length,
                'scale': getattr(type_, 'scale', None),
                'precision': getattr(type_, 'precision', None),
                'radix': 10 if code in {TYPE_SMALLINT, TYPE_INTEGER, TYPE_BIGINT,
                                        TYPE_FLOAT, TYPE_NUMERIC} else None,
                'not_null': not col.get('nullable', True),
                'remarks': col.get('comment'),
                'default_value': col.get('default'),
                'auto_increment': autoincrement is True,
                'auto_generated': bool(col.get('computed') or col.get('identity')),
                })
        return attributes

    def get_table_ddl(self, table: Table, options: dict[str, Any]) -> str:
        """Synthesize a definition from the entity itself, without the catalog.
        """
        dialect = table.data_source.engine.dialect
        qualified = options.get('fully_qualified_names', True)
        if table.is_view:
            preparer = dialect.identifier_preparer
            name = preparer.quote(table.name)
            if qualified:
                name = f'{preparer.quote_schema(table.container.name)}.{name}'
            body = (table.definition or '').strip()
            if not body:
                return f'-- View definition for {name} is not available'
            if body.upper().startswith('CREATE'):
                return body
            return f'CREATE VIEW {name} AS\n{body}'

        metadata = sa.MetaData()
        columns = [
            sa.Column(col.name, _DeclaredType(_column_type_spec(col)),
                      nullable=not col.not_null,
                      server_default=sa.text(col.default_value) if col.default_value else None,
                      comment=col.remarks)
            for col in table.columns
            ]
        sa_table = sa.Table(table.name, metadata, *columns,
                            schema=table.container.name if qualified else None,
                            comment=table.remarks)
        return str(CreateTable(sa_table).compile(dialect=dialect)).strip()

    def get_view_ddl(self, table: Table, options: dict[str, Any]) -> str:
        return self.get_table_ddl(table, options)

    def get_procedure_ddl(self, procedure: Procedure) -> str:
        return procedure.definition or ''

    def supports_sequences(self, data_source: DataSource) -> bool:
        return bool(data_source.engine.dialect.supports_sequences)

    def load_sequences(self, container: Schema) -> list[Sequence]:
        """Sequence names from the Inspector. Values are not part of the
        standard metadata and stay unset.
        """
        data_source = container.data_source
        if not self.supports_sequences(data_source):
            return []
        try:
            with open_meta_session(data_source, 'Read sequences') as session:
                names = session.inspector.get_sequence_names(schema=container.name)
        except SQLAlchemyError as e:
            raise MetadataAccessError(e, data_source) from e
        return [Sequence(container, name.strip()) for name in sorted(names) if name]

    def create_query_transformer(self, transform_type: 'QueryTransformType') -> 'QueryTransformer | None':
        return None
