"""
Metadata access exception classes.
"""
import re
from typing import Any

RETRYABLE_PATTERNS = [
    # SSL/TLS errors
    r'ssl',
    r'tls',
    # Connection drops
    r'connection.*(closed|reset|refused|lost|terminated|broken)',
    r'server closed',
    r'eof detected',
    r'broken pipe',
    r'connection reset',
    # Timeouts
    r'timeout',
    r'timed out',
    # Network issues
    r'could not connect',
    r'no route to host',
    r'network.*(unreachable|error)',
    r'host.*(unreachable|down)',
    # Database unavailable
    r'database.*unavailable',
    r'too many connections',
    r'connection pool',
]

_RETRYABLE_REGEX = re.compile('|'.join(RETRYABLE_PATTERNS), re.IGNORECASE)


def is_retryable_error(exc: BaseException) -> bool:
    """Check if an exception represents a transient error worth retrying.

    Nothing in this package retries. The flag is exposed so the caller
    driving an introspection pass can decide whether to run it again.

    :param exc: The exception to check.
    :returns: True if the error is likely transient and worth retrying.
    """
    error_msg = str(exc).lower()
    return bool(_RETRYABLE_REGEX.search(error_msg))


class DatabaseError(Exception):
    """Base class for all dbmeta errors.
    """


class MetadataAccessError(DatabaseError):
    """Failure while preparing, executing or reading a catalog query.

    Always scoped to the data source that owns the failing request.
    """

    def __init__(self, cause: BaseException | str, data_source: Any,
                 query: str | None = None) -> None:
        self.data_source = data_source
        self.query = query
        self.cause = cause if isinstance(cause, BaseException) else None
        name = getattr(data_source, 'name', data_source)
        super().__init__(f'[{name}] {cause}')

    @property
    def retryable(self) -> bool:
        return is_retryable_error(self.cause or self)
