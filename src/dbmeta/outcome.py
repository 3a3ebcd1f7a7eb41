"""
Result type for adapter hooks.

Every hook on a meta model answers either ``Custom(value)`` - the adapter
produced the result itself - or ``USE_DEFAULT``, asking the introspector to
run the generic implementation instead.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar('T')


@dataclass(frozen=True, slots=True)
class Custom(Generic[T]):
    """Adapter-specific result."""
    value: T


class UseDefault:
    """Marker asking for the generic behavior. Use the ``USE_DEFAULT`` instance."""

    _instance = None

    def __new__(cls) -> 'UseDefault':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'USE_DEFAULT'

    def __bool__(self) -> bool:
        return False


USE_DEFAULT = UseDefault()

Outcome = Custom[T] | UseDefault

__all__ = ['Custom', 'UseDefault', 'USE_DEFAULT', 'Outcome']
