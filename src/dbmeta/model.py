"""
Catalog entities produced by an introspection pass.

Entities are transient: one pass builds them from a single result set and
hands them to the caller, the next refresh replaces them. Database adapters
subclass these to attach engine-specific behavior without changing the
meaning of any field.
"""
import itertools
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from dbmeta.meta.base import MetaModel
    from dbmeta.options import DataSourceOptions


class TableKind(str, Enum):
    """Closed set of table type tags."""
    TABLE = 'TABLE'
    FLEXTABLE = 'FLEXTABLE'
    VIEW = 'VIEW'

    @classmethod
    def from_tag(cls, tag: str | None) -> 'TableKind':
        """Decode a catalog type tag.

        Raises
            ValueError: If the tag does not name a table, flex table or view
        """
        if tag is None:
            raise ValueError('Table type tag is missing')
        normalized = tag.strip().upper()
        normalized = _TAG_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f'Unsupported table type: {tag!r}') from None


_TAG_ALIASES = {
    'BASE TABLE': 'TABLE',
    'SYSTEM TABLE': 'TABLE',
    'FLEX TABLE': 'FLEXTABLE',
    'SYSTEM VIEW': 'VIEW',
}

_DATA_SOURCE_IDS = itertools.count(1)


class DataSource:
    """A registered database: its engine, its adapter and its options.

    `uid` is unique per instance; two registrations with the same name are
    still different data sources.
    """

    def __init__(self, name: str, engine: 'Engine', meta_model: 'MetaModel',
                 options: 'DataSourceOptions | None' = None) -> None:
        self.name = name
        self.engine = engine
        self.meta_model = meta_model
        self.options = options
        self.uid = next(_DATA_SOURCE_IDS)

    @property
    def dialect_name(self) -> str:
        return str(self.engine.dialect.name).lower()

    def __repr__(self) -> str:
        return f'{type(self).__name__}(name={self.name!r}, dialect={self.dialect_name!r})'


class Schema:
    """Named container of tables, sequences and procedures.
    """

    def __init__(self, data_source: DataSource, catalog: str | None, name: str) -> None:
        self.data_source = data_source
        self.catalog = catalog
        self.name = name

    @property
    def is_system(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f'{type(self).__name__}(name={self.name!r})'


class TableColumn:
    """Column of a table, identified by its ordinal position.
    """

    def __init__(self,
                 table: 'Table',
                 name: str,
                 type_name: str | None,
                 value_type: int,
                 source_type: int,
                 ordinal_position: int,
                 column_size: int | None = None,
                 char_length: int | None = None,
                 scale: int | None = None,
                 precision: int | None = None,
                 radix: int | None = None,
                 not_null: bool = False,
                 remarks: str | None = None,
                 default_value: str | None = None,
                 auto_increment: bool = False,
                 auto_generated: bool = False):
        """
        Args:
            table: Owning table
            name: Column name
            type_name: Declared type name as reported by the catalog
            value_type: Generic value type code
            source_type: Driver/source type code
            ordinal_position: 1-based position within the table
            column_size: Maximum size (precision for numerics)
            char_length: Maximum length in characters
            scale: Numeric scale
            precision: Numeric precision
            radix: Numeric radix
            not_null: True if NULL is not allowed
            remarks: Column comment
            default_value: Default value expression
            auto_increment: True for identity/auto-increment columns
            auto_generated: True for generated columns
        """
        self.table = table
        self.name = name
        self.type_name = type_name
        self.value_type = value_type
        self.source_type = source_type
        self.ordinal_position = ordinal_position
        self.column_size = column_size
        self.char_length = char_length
        self.scale = scale
        self.precision = precision
        self.radix = radix
        self.not_null = not_null
        self.remarks = remarks
        self.default_value = default_value
        self.auto_increment = auto_increment
        self.auto_generated = auto_generated

    @property
    def nullable(self) -> bool:
        return not self.not_null

    def __repr__(self) -> str:
        return (f'{type(self).__name__}(name={self.name!r}, type_name={self.type_name!r}, '
                f'ordinal_position={self.ordinal_position})')


class Table:
    """Table, flex table or view inside a schema.
    """

    def __init__(self, container: Schema, name: str, kind: TableKind, *,
                 owner: str | None = None, definition: str | None = None,
                 remarks: str | None = None, persisted: bool = True) -> None:
        self.container = container
        self.name = name
        self.kind = kind
        self.owner = owner
        self.definition = definition
        self.remarks = remarks
        self.persisted = persisted
        self.columns: list[TableColumn] = []

    @property
    def data_source(self) -> DataSource:
        return self.container.data_source

    @property
    def schema(self) -> Schema:
        return self.container

    @property
    def full_name(self) -> str:
        return f'{self.container.name}.{self.name}'

    @property
    def is_view(self) -> bool:
        return self.kind is TableKind.VIEW

    @property
    def is_persisted(self) -> bool:
        return self.persisted

    def add_column(self, column: TableColumn) -> None:
        """Append a column, keeping ordinal positions unique and increasing.

        Raises
            ValueError: If the column's position does not follow the last one
        """
        if self.columns and column.ordinal_position <= self.columns[-1].ordinal_position:
            raise ValueError(
                f'Column {column.name!r} of {self.full_name} has ordinal position '
                f'{column.ordinal_position}, expected more than '
                f'{self.columns[-1].ordinal_position}')
        self.columns.append(column)

    def get_column(self, name: str) -> TableColumn | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def __repr__(self) -> str:
        return f'{type(self).__name__}(name={self.full_name!r}, kind={self.kind.value})'


class Sequence:
    """Sequence object. Every numeric attribute is optional.
    """

    def __init__(self, container: Schema, name: str, description: str | None = None,
                 last_value: int | None = None, min_value: int | None = None,
                 max_value: int | None = None, increment_by: int | None = None) -> None:
        self.container = container
        self.name = name
        self.description = description
        self.last_value = last_value
        self.min_value = min_value
        self.max_value = max_value
        self.increment_by = increment_by

    def to_dict(self) -> dict[str, Any]:
        return {
            'schema': self.container.name,
            'name': self.name,
            'last_value': self.last_value,
            'min_value': self.min_value,
            'max_value': self.max_value,
            'increment_by': self.increment_by,
            }

    def __repr__(self) -> str:
        return f'{type(self).__name__}(name={self.name!r}, last_value={self.last_value!r})'


class Procedure:
    """Stored function or procedure.
    """

    def __init__(self, container: Schema, name: str, definition: str | None = None) -> None:
        self.container = container
        self.name = name
        self.definition = definition

    @property
    def data_source(self) -> DataSource:
        return self.container.data_source

    @property
    def schema(self) -> Schema:
        return self.container

    def __repr__(self) -> str:
        return f'{type(self).__name__}(name={self.container.name}.{self.name})'
