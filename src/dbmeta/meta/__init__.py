"""
Meta model registry for database-specific catalog adapters.
"""
from functools import lru_cache

from dbmeta.meta.base import _META_MODEL_REGISTRY
from dbmeta.meta.base import MetaModel as MetaModel
from dbmeta.meta.base import register_meta_model as register_meta_model
from dbmeta.meta.vertica import VerticaMetaModel as VerticaMetaModel


def _validate_name(name: str) -> None:
    """Raise ValueError if no meta model is registered under `name`."""
    if name not in _META_MODEL_REGISTRY:
        available = list(_META_MODEL_REGISTRY.keys())
        raise ValueError(f'Unsupported meta model: {name}. Available: {available}')


@lru_cache(maxsize=8)
def _get_meta_model(name: str) -> MetaModel:
    """Get cached meta model instance for a name."""
    _validate_name(name)
    return _META_MODEL_REGISTRY[name]()


def get_meta_model(name: str) -> MetaModel:
    """Get the meta model instance registered under `name`.

    Meta models hold no state, so one instance is shared by every data
    source of the same kind.
    """
    return _get_meta_model(name)


def get_available_meta_models() -> list[str]:
    """Return list of registered meta model names."""
    return list(_META_MODEL_REGISTRY.keys())


def is_supported_meta_model(name: str) -> bool:
    """Check if a meta model is registered under `name`."""
    return name in _META_MODEL_REGISTRY


def get_meta_model_class(name: str) -> type[MetaModel]:
    """Get the meta model class for a name without instantiating."""
    _validate_name(name)
    return _META_MODEL_REGISTRY[name]
