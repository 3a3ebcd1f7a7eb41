"""
Unit tests for introspection result caching.
"""
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from dbmeta.cache import Cache, _create_cache_key, cacheable_introspection
from dbmeta.model import DataSource


class _Container:
    def __init__(self, name):
        self.name = name


class _Reader:

    def __init__(self, name='ds'):
        self.data_source = DataSource(name, None, None)
        self.calls = 0

    @cacheable_introspection('test', ttl=1, maxsize=10)
    def load(self, container, name=None):
        self.calls += 1
        return [container.name, name, self.calls]


def test_cache_key_ignores_bypass():
    source = DataSource('DS', None, None)
    key = _create_cache_key(source, 'Public', ('x',), {'bypass_cache': True, 'b': 1})
    assert key == (source.uid, 'Public', "'x'", 'b=1')


def test_same_name_sources_do_not_share_entries():
    first, second = _Reader('vertica:analytics'), _Reader('vertica:analytics')
    schema = _Container('public')

    assert first.load(schema) == ['public', None, 1]
    assert second.load(schema) == ['public', None, 1]
    assert second.calls == 1


def test_filter_case_is_kept():
    reader = _Reader()
    schema = _Container('public')

    assert reader.load(schema, name='orders') == ['public', 'orders', 1]
    assert reader.load(schema, name='ORDERS') == ['public', 'ORDERS', 2]


def test_hit_and_bypass():
    reader = _Reader()
    schema = _Container('public')

    assert reader.load(schema) == ['public', None, 1]
    assert reader.load(schema) == ['public', None, 1]
    assert reader.load(schema, bypass_cache=True) == ['public', None, 2]
    assert reader.load(schema, name='t') == ['public', 't', 3]
    assert reader.calls == 3


def test_expiry():
    reader = _Reader()
    schema = _Container('public')
    reader.load(schema)
    time.sleep(1.1)
    reader.load(schema)
    assert reader.calls == 2


def test_clear_for_data_source():
    first, second = _Reader('one'), _Reader('two')
    schema = _Container('public')
    first.load(schema)
    second.load(schema)

    Cache.get_instance().clear_for_data_source(first.data_source)

    first.load(schema)
    second.load(schema)
    assert first.calls == 2
    assert second.calls == 1


def test_failure_not_cached():
    class Failing(_Reader):
        @cacheable_introspection('test_failing', ttl=60, maxsize=10)
        def load(self, container, name=None):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError('catalog unavailable')
            return ['ok']

    reader = Failing()
    schema = _Container('public')
    with pytest.raises(RuntimeError):
        reader.load(schema)
    assert reader.load(schema) == ['ok']
    assert reader.calls == 2


def test_concurrent_readers():
    reader = _Reader()
    schemas = [_Container(f's{i}') for i in range(8)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda s: reader.load(s)[0], schemas * 25))

    assert results == [s.name for s in schemas * 25]
    assert reader.calls >= len(schemas)
