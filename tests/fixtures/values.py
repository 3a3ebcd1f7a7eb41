"""
Catalog rows as Vertica returns them.
"""
import pytest


@pytest.fixture
def table_rows():
    """Rows of the unified table/view enumeration query."""
    return [
        {'TABLE_CAT': None, 'TABLE_SCHEM': 'public', 'TABLE_NAME': 'events', 'TABLE_TYPE': 'FLEXTABLE',
         'TYPE_CAT': None, 'owner_name': 'dbadmin', 'DEFINITION': None, 'REMARKS': None},
        {'TABLE_CAT': None, 'TABLE_SCHEM': 'public', 'TABLE_NAME': 'orders', 'TABLE_TYPE': 'TABLE',
         'TYPE_CAT': None, 'owner_name': 'dbadmin', 'DEFINITION': None, 'REMARKS': 'Customer orders'},
        {'TABLE_CAT': None, 'TABLE_SCHEM': 'public', 'TABLE_NAME': 'recent_orders', 'TABLE_TYPE': 'VIEW',
         'TYPE_CAT': None, 'owner_name': 'analyst', 'DEFINITION': 'SELECT * FROM public.orders',
         'REMARKS': None},
    ]


@pytest.fixture
def sequence_rows():
    """Rows of v_catalog.sequences."""
    return [
        {'sequence_schema': 'public', 'sequence_name': ' seq1 ', 'current_value': 10,
         'minimum': 1, 'maximum': 100, 'increment_by': 1},
        {'sequence_schema': 'public', 'sequence_name': None, 'current_value': 5,
         'minimum': 1, 'maximum': 10, 'increment_by': 1},
        {'sequence_schema': 'public', 'sequence_name': 'seq2', 'current_value': None,
         'minimum': None, 'maximum': 9223372036854775807, 'increment_by': None},
    ]
