import pytest
from dbmeta.exceptions import MetadataAccessError, is_retryable_error
from dbmeta.model import Schema, Table, TableColumn, TableKind


@pytest.mark.parametrize(('tag', 'expected'), [
    ('TABLE', TableKind.TABLE),
    ('flextable', TableKind.FLEXTABLE),
    ('VIEW', TableKind.VIEW),
    ('BASE TABLE', TableKind.TABLE),
    (' system view ', TableKind.VIEW),
])
def test_table_kind_from_tag(tag, expected):
    assert TableKind.from_tag(tag) is expected


@pytest.mark.parametrize('tag', [None, 'SYNONYM', ''])
def test_table_kind_rejects_unknown(tag):
    with pytest.raises(ValueError):
        TableKind.from_tag(tag)


class TestTable:

    @pytest.fixture
    def table(self):
        return Table(Schema(None, None, 'public'), 'orders', TableKind.TABLE)

    def test_columns_in_ordinal_order(self, table):
        table.add_column(TableColumn(table, 'id', 'int', 4, 4, 1, not_null=True))
        table.add_column(TableColumn(table, 'note', 'varchar', 12, 12, 3))

        assert table.get_column('note').ordinal_position == 3
        assert table.get_column('missing') is None
        assert table.get_column('id').nullable is False

    def test_duplicate_position_rejected(self, table):
        table.add_column(TableColumn(table, 'id', 'int', 4, 4, 1))
        with pytest.raises(ValueError):
            table.add_column(TableColumn(table, 'other', 'int', 4, 4, 1))

    def test_names(self, table):
        assert table.full_name == 'public.orders'
        assert table.is_persisted
        assert not table.is_view


class TestMetadataAccessError:

    def test_scoped_message(self):
        source = Schema(None, None, 'x')
        error = MetadataAccessError(RuntimeError('boom'), source, 'SELECT 1')
        assert str(error) == '[x] boom'
        assert error.data_source is source
        assert error.query == 'SELECT 1'
        assert isinstance(error.cause, RuntimeError)

    @pytest.mark.parametrize(('message', 'retryable'), [
        ('SSL SYSCALL error: EOF detected', True),
        ('Connection reset by peer', True),
        ('Query timed out', True),
        ('relation "v_catalog.nope" does not exist', False),
    ])
    def test_retryable(self, message, retryable):
        assert is_retryable_error(Exception(message)) is retryable
        assert MetadataAccessError(Exception(message), 'ds').retryable is retryable
