"""
Vertica catalog emulated on SQLite.

The data source uses the Vertica meta model over a SQLite engine. Every new
DBAPI connection attaches a ``v_catalog`` database holding the catalog
tables the adapter queries, a ``public`` database holding the user tables,
and registers an ``EXPORT_OBJECTS`` function answering object DDL.
"""
import dbmeta
import pytest
import sqlalchemy as sa

CATALOG_DDL = [
    """CREATE TABLE v_catalog.tables (
        table_schema VARCHAR(128), table_name VARCHAR(128), is_flextable BOOLEAN,
        owner_name VARCHAR(128), table_definition VARCHAR(1000))""",
    """CREATE TABLE v_catalog.views (
        table_schema VARCHAR(128), table_name VARCHAR(128),
        owner_name VARCHAR(128), view_definition VARCHAR(1000))""",
    """CREATE TABLE v_catalog.comments (
        object_type VARCHAR(32), object_schema VARCHAR(128),
        object_name VARCHAR(128), comment VARCHAR(1000))""",
    """CREATE TABLE v_catalog.sequences (
        sequence_schema VARCHAR(128), sequence_name VARCHAR(128), current_value BIGINT,
        minimum BIGINT, maximum BIGINT, increment_by BIGINT)""",
    """CREATE TABLE v_catalog.user_functions (
        schema_name VARCHAR(128), function_name VARCHAR(128), function_definition VARCHAR(1000))""",
    'CREATE TABLE public.orders (id INTEGER NOT NULL, amount NUMERIC(18, 4), note VARCHAR(80))',
    'CREATE TABLE public.events (payload VARCHAR(1000))',
]

CATALOG_ROWS = [
    """INSERT INTO v_catalog.tables VALUES
        ('public', 'orders', false, 'dbadmin', NULL),
        ('public', 'events', true, 'dbadmin', NULL),
        ('staging', 'orders_load', false, 'loader', NULL)""",
    """INSERT INTO v_catalog.views VALUES
        ('public', 'recent_orders', 'analyst', 'SELECT * FROM public.orders WHERE id > 100')""",
    """INSERT INTO v_catalog.comments VALUES
        ('TABLE', 'public', 'orders', 'Customer orders'),
        ('VIEW', 'public', 'recent_orders', 'Orders of the last day')""",
    """INSERT INTO v_catalog.sequences VALUES
        ('public', 'order_seq ', 1000, 1, 9223372036854775807, 1),
        ('public', NULL, 1, 1, 10, 1),
        ('public', 'audit_seq', NULL, NULL, NULL, NULL),
        ('staging', 'load_seq', 5, 1, 100, 5)""",
    """INSERT INTO v_catalog.user_functions VALUES
        ('public', 'add_tax', 'RETURN amount * 1.2'),
        ('public', 'split_fn', 'CREATE FUNC'),
        ('public', 'split_fn', 'TION body')""",
]

EXPORTED_DDL = {
    'public.orders': 'CREATE TABLE public.orders (id int NOT NULL, amount numeric(18,4), note varchar(80));',
    'public.recent_orders': 'CREATE VIEW public.recent_orders AS SELECT * FROM public.orders WHERE id > 100;',
}


def export_objects(destination, name, ksafe):
    return EXPORTED_DDL.get(name, '')


@pytest.fixture
def vertica_catalog(tmp_path):
    """Vertica data source backed by SQLite databases in `tmp_path`."""
    data_source = dbmeta.connect({
        'drivername': 'sqlite',
        'database': str(tmp_path / 'main.db'),
        'meta_model': 'vertica',
        'name': 'vertica:sqlite',
    })
    attached = {
        'v_catalog': tmp_path / 'v_catalog.db',
        'public': tmp_path / 'public.db',
    }

    @sa.event.listens_for(data_source.engine, 'connect')
    def on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        for alias, path in attached.items():
            cursor.execute(f"ATTACH DATABASE '{path}' AS {alias}")
        cursor.close()
        dbapi_connection.create_function('EXPORT_OBJECTS', 3, export_objects)

    with data_source.engine.begin() as conn:
        for statement in CATALOG_DDL + CATALOG_ROWS:
            conn.execute(sa.text(statement))

    return data_source


@pytest.fixture
def reader(vertica_catalog):
    return dbmeta.introspect(vertica_catalog)
