import pytest

from strata import (
    ConfigurationMap,
    Key,
    Location,
    Misconfiguration,
    Override,
    PropertyLocation,
    Search,
    int_type,
    overriding,
    search,
    string_type,
)


x = Key('x', string_type)
y = Key('y', string_type)
z = Key('z', string_type)
bob = Key('bob', string_type)


@pytest.fixture
def overrides():
    return ConfigurationMap({'x': 'XX', 'z': 'ZZ'}, Location('overrides'))


@pytest.fixture
def defaults():
    return ConfigurationMap({'x': 'x', 'y': 'y'}, Location('defaults'))


def test_overrides_default_properties(overrides, defaults):
    subject = overrides.overriding(defaults)

    assert isinstance(subject, Override)
    assert subject[x] == 'XX'
    assert subject[y] == 'y'
    assert subject[z] == 'ZZ'


def test_contains(overrides, defaults):
    subject = overrides.overriding(defaults)

    for key in (x, y, z):
        assert subject.contains(key)
        assert key in subject
    assert bob not in subject
    assert subject.get_or_none(bob) is None


def test_provenance(overrides, defaults):
    subject = overrides.overriding(defaults)

    assert subject.location_of(x) == overrides.location_of(x) == PropertyLocation(x, Location('overrides'), 'x')
    assert subject.location_of(y) == defaults.location_of(y) == PropertyLocation(y, Location('defaults'), 'y')
    assert subject.location_of(bob) is None


def test_override_wins_unconditionally(defaults):
    # an override that can't be parsed is not silently skipped
    subject = ConfigurationMap({'x': 'not a number'}, Location('overrides')).overriding(
        ConfigurationMap({'x': '1'}, Location('defaults')))

    with pytest.raises(Misconfiguration) as e:
        subject.get(Key('x', int_type))

    assert 'overrides x - invalid int: not a number' == str(e.value)


def test_search_path(overrides, defaults):
    subject = overrides.overriding(defaults)

    for key in (x, y, z):
        assert subject.search_path(key) == [
            PropertyLocation(key, overrides.location, key.name),
            PropertyLocation(key, defaults.location, key.name),
        ]


def test_missing_property_lists_searched_locations(overrides, defaults):
    subject = overrides.overriding(defaults)

    with pytest.raises(Misconfiguration) as e:
        subject.get(Key('missing.property.name', string_type))

    assert str(e.value) == ('missing.property.name property not found; searched:\n'
                            ' - missing.property.name in overrides\n'
                            ' - missing.property.name in defaults\n')


def test_list(overrides, defaults):
    subject = overrides.overriding(defaults)

    assert subject.list() == overrides.list() + defaults.list()
    assert [location for location, _ in subject.list()] == [Location('overrides'), Location('defaults')]


def test_chained():
    a = ConfigurationMap({'a': 'A1'}, Location('a'))
    b = ConfigurationMap({'a': 'A2', 'b': 'B1'}, Location('b'))
    c = ConfigurationMap({'a': 'A3', 'b': 'B2', 'c': 'C1'}, Location('c'))

    for subject in (a.overriding(b.overriding(c)), overriding(a, b, c), overriding(a, None, b, c)):
        assert subject[Key('a', string_type)] == 'A1'
        assert subject[Key('b', string_type)] == 'B1'
        assert subject[Key('c', string_type)] == 'C1'
        assert [location.description for location, _ in subject.list()] == ['a', 'b', 'c']
        assert [location.source for location in subject.search_path(Key('d', string_type))] == [
            Location('a'), Location('b'), Location('c'),
        ]


def test_overriding_single():
    a = ConfigurationMap({'a': 'A1'})

    assert overriding(a) is a
    assert overriding(a, None) is a


@pytest.fixture
def configs():
    return (
        ConfigurationMap({'a': 'A1'}, Location('a')),
        ConfigurationMap({'a': 'A2', 'b': 'B1'}, Location('b')),
        ConfigurationMap({'a': 'A3', 'b': 'B2', 'c': 'C1'}, Location('c')),
    )


def test_search(configs):
    subject = search(*configs)

    assert isinstance(subject, Search)
    assert subject[Key('a', string_type)] == 'A1'
    assert subject[Key('b', string_type)] == 'B1'
    assert subject[Key('c', string_type)] == 'C1'


def test_search_contains(configs):
    subject = search(*configs)

    for name in 'abc':
        assert Key(name, string_type) in subject
    assert bob not in subject
    assert subject.get_or_none(bob) is None


def test_search_provenance(configs):
    subject = search(*configs)

    assert subject.location_of(Key('b', string_type)).source == Location('b')
    assert subject.location_of(Key('c', string_type)).source == Location('c')
    assert subject.location_of(bob) is None


def test_search_path_and_list(configs):
    subject = search(*configs)

    assert [location.description for location in subject.search_path(bob)] == ['bob in a', 'bob in b', 'bob in c']
    assert subject.list() == configs[0].list() + configs[1].list() + configs[2].list()

    with pytest.raises(Misconfiguration) as e:
        subject.get(bob)
    assert str(e.value) == 'bob property not found; searched:\n - bob in a\n - bob in b\n - bob in c\n'


def test_empty_search():
    subject = search()

    assert bob not in subject
    assert subject.search_path(bob) == []
    assert subject.list() == []

    with pytest.raises(Misconfiguration) as e:
        subject.get(bob)
    assert str(e.value) == 'bob property not found; searched:\n'
