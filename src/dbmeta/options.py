from dataclasses import dataclass

from dbmeta.meta import get_available_meta_models, is_supported_meta_model

from libb import ConfigOptions, scriptname

__all__ = [
    'DataSourceOptions',
    'DRIVERS',
]

# drivername -> (SQLAlchemy driver, default port, required fields)
DRIVERS: dict[str, tuple[str, int, list[str]]] = {
    'vertica': ('vertica+vertica_python', 5433,
                ['hostname', 'username', 'database', 'port']),
    'postgresql': ('postgresql+psycopg', 5432,
                   ['hostname', 'username', 'password', 'database', 'port']),
    'sqlite': ('sqlite', 0, ['database']),
}


@dataclass
class DataSourceOptions(ConfigOptions):
    """Options

    supported driver names: `vertica`, `postgresql`, `sqlite`

    `meta_model` selects the catalog adapter. It defaults to the adapter
    registered under the driver name, or `generic` when there is none.

    Connection pooling options:
    - use_pool: Whether to use connection pooling (default: False)
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Maximum seconds a connection can be idle (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)
    """
    name: str = None
    drivername: str = 'vertica'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    meta_model: str = None
    # Connection pooling parameters
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        if self.drivername not in DRIVERS:
            raise ValueError(f'drivername must be one of: {list(DRIVERS)}')
        _, default_port, required = DRIVERS[self.drivername]
        self.port = self.port or default_port
        for field in required:
            if not getattr(self, field):
                raise ValueError(f'field {field} cannot be None or 0')
        if self.meta_model is None:
            self.meta_model = self.drivername if is_supported_meta_model(self.drivername) else 'generic'
        if not is_supported_meta_model(self.meta_model):
            raise ValueError(f'meta_model must be one of: {get_available_meta_models()}')
        self.appname = self.appname or scriptname() or 'python_console'
        self.name = self.name or f'{self.drivername}:{self.database}'
