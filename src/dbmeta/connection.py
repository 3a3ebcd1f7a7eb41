"""
Data source registration with SQLAlchemy engines.

This module provides:
1. The `connect()` function turning options into a data source entity
2. Engine creation and management through a thread-safe registry
3. URL construction per driver
"""
import atexit
import logging
import threading
from collections.abc import Callable
from dataclasses import fields
from typing import Any

import sqlalchemy as sa
from dbmeta.introspector import Introspector, dispatch
from dbmeta.meta import get_meta_model
from dbmeta.model import DataSource
from dbmeta.options import DRIVERS, DataSourceOptions
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from libb import load_options

__all__ = [
    'connect',
    'introspect',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def create_url_from_options(options: DataSourceOptions,
                            url_creator: Callable[..., sa.URL] = sa.URL.create) -> sa.URL:
    """Convert DataSourceOptions to SQLAlchemy URL.
    """
    drivername = DRIVERS[options.drivername][0]
    if options.drivername == 'sqlite':
        return url_creator(drivername=drivername, database=options.database)

    query = {}
    if options.drivername == 'vertica':
        if options.timeout:
            query['connection_timeout'] = str(options.timeout)
        query['session_label'] = options.appname
    elif options.timeout:
        query['connect_timeout'] = str(options.timeout)

    return url_creator(
        drivername=drivername,
        username=options.username,
        password=options.password,
        host=options.hostname,
        port=options.port,
        database=options.database,
        query=query
    )


def get_engine_for_options(options: DataSourceOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = str(options)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.name}')
            return _engine_registry[key]

        engine_kwargs: dict[str, Any] = {'echo': False}
        if not options.use_pool:
            engine_kwargs['poolclass'] = NullPool
        else:
            engine_kwargs['pool_size'] = options.pool_max_connections
            engine_kwargs['pool_recycle'] = options.pool_max_idle_time
            engine_kwargs['pool_timeout'] = options.pool_wait_timeout
            engine_kwargs['max_overflow'] = 10
            engine_kwargs['pool_pre_ping'] = True
            engine_kwargs['pool_reset_on_return'] = 'rollback'
        engine_kwargs.update(kwargs)

        engine = engine_factory(create_url_from_options(options), **engine_kwargs)
        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.name}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in list(_engine_registry.values()):
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


def create_data_source(options: DataSourceOptions, engine: Engine) -> DataSource:
    """Build the data source entity through its meta model."""
    meta_model = get_meta_model(options.meta_model)
    return dispatch(meta_model, 'create_data_source_impl', options.name, engine, options)


def connect(options: DataSourceOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> DataSource:
    """Register a data source

    Args:
        options: Can be:
                - DataSourceOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        DataSource bound to its engine and meta model. No connection is
        opened until the first introspection request.
    """
    if isinstance(options, DataSourceOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DataSourceOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    engine = get_engine_for_options(options)
    data_source = create_data_source(options, engine)
    logger.debug(f'Registered {data_source!r} with meta model {data_source.meta_model.name}')
    return data_source


def introspect(data_source: DataSource) -> Introspector:
    """Catalog reader for a registered data source."""
    return Introspector(data_source)
