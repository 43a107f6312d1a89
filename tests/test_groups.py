import pytest

from strata import ConfigurationMap, Key, PropertyGroup, Subset, int_type, string_type


def test_keys():
    db = PropertyGroup('db')

    assert db.key('host', string_type) == Key('db.host', string_type)
    assert db.key('port', int_type).parse is int_type


def test_nested_groups():
    pool = PropertyGroup('db').group('pool')

    assert pool.name == 'db.pool'
    assert pool.key('size', int_type) == Key('db.pool.size', int_type)
    assert PropertyGroup('size', parent=pool).name == 'db.pool.size'


def test_group_keys_resolve():
    db = PropertyGroup('db')
    config = ConfigurationMap({'db.host': 'localhost', 'db.pool.size': '8'})

    assert config[db.key('host', string_type)] == 'localhost'
    assert config[db.group('pool').key('size', int_type)] == 8
    # a group matches the prefix of a subset
    assert Subset(config, db.name)[Key('host', string_type)] == 'localhost'


def test_name_required():
    with pytest.raises(ValueError):
        PropertyGroup('')
    with pytest.raises(ValueError):
        PropertyGroup('db').group('')


def test_repr():
    assert repr(PropertyGroup('db').group('pool')) == "strata.groups.PropertyGroup('db.pool')"
