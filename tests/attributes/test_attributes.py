import collections.abc

import pytest

from nodegraph._cogs.structs.attributes import Attributes
from nodegraph._cogs.structs.errors import ConfigurationError


def test_no_schema_fails():
    with pytest.raises(ConfigurationError):
        Attributes(None)


def test_empty_schema_is_valid():
    attrs = Attributes([])
    assert attrs.registered == ()
    assert attrs.export_data() == {}


def test_declared_fields_are_registered_but_unset():
    attrs = Attributes(['id', 'name'])
    assert attrs.registered == ('id', 'name')
    assert attrs.get('id') is None
    assert attrs.get('name') is None
    assert 'id' not in attrs
    assert len(attrs) == 0


def test_unset_field_gives_default():
    attrs = Attributes(['id'])
    assert attrs.get('id', 'fallback') == 'fallback'
    assert attrs.get('unknown', 'fallback') == 'fallback'


def test_setting_declared_field():
    attrs = Attributes(['id', 'name'])
    result = attrs.set('name', 'abc')
    assert result is attrs
    assert attrs.get('name') == 'abc'
    assert attrs['name'] == 'abc'


def test_setting_unknown_field_registers_it():
    attrs = Attributes(['id'])
    attrs.set('extra', 123)
    assert attrs.registered == ('id', 'extra')
    assert attrs.get('extra') == 123


def test_setting_the_same_unknown_field_registers_it_once():
    attrs = Attributes([])
    attrs.set('extra', 1).set('extra', 2)
    assert attrs.registered == ('extra',)
    assert attrs.get('extra') == 2


def test_initial_data_is_set():
    attrs = Attributes(['id'], {'id': '123', 'other': 'xyz'})
    assert attrs.export_data() == {'id': '123', 'other': 'xyz'}
    assert attrs.registered == ('id', 'other')


def test_set_data_in_the_key_order():
    attrs = Attributes([])
    result = attrs.set_data({'b': 1, 'a': 2, 'c': 3})
    assert result is attrs
    assert list(attrs) == ['b', 'a', 'c']
    assert attrs.registered == ('b', 'a', 'c')


def test_set_data_overwrites_previous_values():
    attrs = Attributes(['id'], {'id': '123', 'name': 'old'})
    attrs.set_data({'name': 'new'})
    assert attrs.export_data() == {'id': '123', 'name': 'new'}


def test_export_is_a_copy():
    attrs = Attributes(['id'], {'id': '123'})
    exported = attrs.export_data()
    exported['id'] = '456'
    exported['extra'] = True
    assert attrs.export_data() == {'id': '123'}


def test_is_a_readonly_mapping():
    attrs = Attributes(['id'], {'id': '123'})
    assert isinstance(attrs, collections.abc.Mapping)
    assert not isinstance(attrs, collections.abc.MutableMapping)
    assert dict(attrs) == {'id': '123'}


def test_repr():
    attrs = Attributes(['id'], {'id': '123'})
    assert repr(attrs) == "Attributes({'id': '123'})"
