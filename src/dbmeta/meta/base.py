"""
Base meta model interface for catalog adapters.

A meta model adapts the generic introspection behavior to one database's
catalog conventions. Every hook returns an ``Outcome``: ``Custom(value)``
when the adapter produced the result itself, or ``USE_DEFAULT`` when the
introspector should run the generic implementation
(``dbmeta.meta.generic.GenericMetaModel``) instead.

This base class defers every hook, so a subclass overrides only the
operations where its database deviates from the standard metadata shape.
Adapters hold no state between calls.
"""
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dbmeta.outcome import USE_DEFAULT, Outcome

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from dbmeta.model import DataSource, Procedure, Schema, Sequence, Table
    from dbmeta.model import TableColumn
    from dbmeta.options import DataSourceOptions
    from dbmeta.session import MetaSession
    from dbmeta.transform import QueryTransformer, QueryTransformType

# Registry of meta model name -> meta model class
# Defined here to avoid circular imports (concrete adapters import from base)
_META_MODEL_REGISTRY: dict[str, type['MetaModel']] = {}


def register_meta_model(name: str):
    """Decorator to register a meta model class under a name.

    Usage:
        @register_meta_model('vertica')
        class VerticaMetaModel(MetaModel):
            ...
    """
    def decorator(cls: type['MetaModel']) -> type['MetaModel']:
        _META_MODEL_REGISTRY[name] = cls
        cls.name = name
        return cls
    return decorator


@register_meta_model('generic')
class MetaModel:
    """Catalog adapter that defers every operation to the generic behavior.
    """

    name = 'generic'

    def create_data_source_impl(self, name: str, engine: 'Engine',
                                options: 'DataSourceOptions | None' = None) -> Outcome['DataSource']:
        """Construct the data source entity for a registration."""
        return USE_DEFAULT

    def create_schema_impl(self, data_source: 'DataSource', catalog: str | None,
                           schema_name: str) -> Outcome['Schema']:
        """Construct a schema entity."""
        return USE_DEFAULT

    def prepare_table_load_statement(self, session: 'MetaSession', owner: 'Schema',
                                     obj: 'Table | None' = None,
                                     object_name: str | None = None) -> Outcome[Any]:
        """Prepare the statement enumerating tables and views of `owner`.

        The statement must expose ``execute_query()`` returning rows with at
        least ``TABLE_NAME`` and ``TABLE_TYPE``.
        """
        return USE_DEFAULT

    def create_table_impl(self, container: 'Schema', table_name: str, table_type: str,
                          row: Mapping[str, Any]) -> Outcome['Table']:
        """Construct a table entity from one enumeration row."""
        return USE_DEFAULT

    def create_table_column_impl(self, table: 'Table', column_name: str, type_name: str | None,
                                 value_type: int, source_type: int, ordinal_pos: int,
                                 column_size: int | None, char_length: int | None,
                                 scale: int | None, precision: int | None, radix: int | None,
                                 not_null: bool, remarks: str | None, default_value: str | None,
                                 auto_increment: bool, auto_generated: bool) -> Outcome['TableColumn']:
        """Construct a column entity from decoded column attributes."""
        return USE_DEFAULT

    def get_table_ddl(self, table: 'Table', options: dict[str, Any]) -> Outcome[str]:
        """Definition text of a table."""
        return USE_DEFAULT

    def get_view_ddl(self, table: 'Table', options: dict[str, Any]) -> Outcome[str]:
        """Definition text of a view."""
        return USE_DEFAULT

    def get_procedure_ddl(self, procedure: 'Procedure') -> Outcome[str]:
        """Source text of a function or procedure."""
        return USE_DEFAULT

    def supports_sequences(self, data_source: 'DataSource') -> Outcome[bool]:
        return USE_DEFAULT

    def load_sequences(self, container: 'Schema') -> Outcome[list['Sequence']]:
        """Enumerate the sequences of a container."""
        return USE_DEFAULT

    def create_query_transformer(self, transform_type: 'QueryTransformType') -> Outcome['QueryTransformer | None']:
        """Supply a query transformer, Custom(None) when none is available."""
        return USE_DEFAULT
