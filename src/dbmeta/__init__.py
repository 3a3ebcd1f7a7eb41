"""
Catalog introspection with database-specific meta models.

A data source is registered with `connect()`; its catalog is read through an
`Introspector`, which consults the data source's meta model and falls back
to the generic behavior wherever the model defers:

    ds = dbmeta.connect(drivername='vertica', hostname='db', username='dbadmin',
                        database='analytics')
    reader = dbmeta.introspect(ds)
    schema = reader.create_schema('public')
    for table in reader.list_tables(schema):
        print(table.name, table.kind, reader.get_ddl(table))
"""
__version__ = '0.1.0'

from dbmeta.connection import connect, dispose_all_engines, introspect
from dbmeta.exceptions import DatabaseError, MetadataAccessError, is_retryable_error
from dbmeta.introspector import Introspector
from dbmeta.meta import MetaModel, VerticaMetaModel, get_meta_model
from dbmeta.meta import register_meta_model
from dbmeta.model import DataSource, Procedure, Schema, Sequence, Table
from dbmeta.model import TableColumn, TableKind
from dbmeta.options import DataSourceOptions
from dbmeta.outcome import USE_DEFAULT, Custom
from dbmeta.transform import QueryTransformerLimit, QueryTransformType

__all__ = [
    'connect',
    'introspect',
    'dispose_all_engines',
    'Introspector',
    'DataSourceOptions',
    'MetaModel',
    'VerticaMetaModel',
    'get_meta_model',
    'register_meta_model',
    'Custom',
    'USE_DEFAULT',
    'DataSource',
    'Schema',
    'Table',
    'TableKind',
    'TableColumn',
    'Sequence',
    'Procedure',
    'QueryTransformType',
    'QueryTransformerLimit',
    'DatabaseError',
    'MetadataAccessError',
    'is_retryable_error',
]
