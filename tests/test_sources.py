import logging
from types import MappingProxyType

import pytest

from strata import (
    ConfigurationMap,
    ConfigurationProperties,
    EnvironmentVariables,
    Key,
    Location,
    Misconfiguration,
    PropertyLocation,
    int_type,
    string_type,
)
from strata.formats import PROPERTIES


def test_map_list():
    subject = ConfigurationMap({'x': '1', 'y': '2'})

    # independent of how many keys are queried
    subject.get_or_none(Key('x', int_type))
    subject.get_or_none(Key('z', int_type))

    assert subject.list() == [(Location.INTRINSIC, {'x': '1', 'y': '2'})]


def test_map_empty():
    for subject in (ConfigurationMap(), ConfigurationMap({}), ConfigurationMap(None)):
        assert subject.list() == [(Location.INTRINSIC, {})]
        assert Key('x', string_type) not in subject


def test_map_is_a_snapshot():
    properties = {'x': '1'}
    subject = ConfigurationMap(properties)
    properties['x'] = '2'
    properties['y'] = '3'

    assert subject[Key('x', int_type)] == 1
    assert Key('y', int_type) not in subject

    listed = subject.list()[0][1]
    assert isinstance(listed, MappingProxyType)
    with pytest.raises(TypeError):
        listed['z'] = '4'


def test_map_repr():
    subject = ConfigurationMap({'x': '1', 'y': '2'}, Location('defaults'))

    assert repr(subject) == "strata.sources.ConfigurationMap(location='defaults', keys=['x', 'y'])"


def test_properties():
    subject = ConfigurationProperties({'x': '1'}, Location('a file'), PROPERTIES)

    assert subject[Key('x', int_type)] == 1
    assert subject.format is PROPERTIES
    assert subject.location_of(Key('x', int_type)) == PropertyLocation(Key('x', int_type), Location('a file'), 'x')
    assert ConfigurationProperties().format is None


@pytest.fixture
def environ():
    return {
        'APP_DB_PASSWORD': 'secret',
        'APP_DB_HOST': 'localhost',
        'APP_HTTP_PORT': '8080',
        'APP_CACHE_MAX-SIZE': '20',
        'OTHER_DB_PASSWORD': 'other',
        'HOME': '/home/user',
    }


def test_environment_translation(environ):
    subject = EnvironmentVariables(environ, prefix='APP_')

    assert subject[Key('db.password', string_type)] == 'secret'
    assert subject[Key('http.port', int_type)] == 8080
    # only dots are translated, hyphens are kept
    assert subject[Key('cache.max-size', int_type)] == 20
    assert Key('home', string_type) not in subject


def test_environment_location(environ):
    subject = EnvironmentVariables(environ, prefix='APP_')
    key = Key('db.password', string_type)

    assert subject.location == Location('environment variables')
    assert subject.location_of(key) == PropertyLocation(key, Location('environment variables'), 'APP_DB_PASSWORD')
    assert subject.search_path(Key('db.user', string_type)) == [
        PropertyLocation(Key('db.user', string_type), Location('environment variables'), 'APP_DB_USER'),
    ]


def test_environment_keeps_hyphens(environ):
    subject = EnvironmentVariables(environ, prefix='APP_')
    key = Key('cache.max-size', int_type)

    assert subject.location_of(key) == PropertyLocation(key, Location('environment variables'), 'APP_CACHE_MAX-SIZE')
    # cache.max_size and cache.max-size don't share a variable
    assert Key('cache.max_size', int_type) not in subject
    assert EnvironmentVariables({}).search_path(Key('opt-x', string_type)) == [
        PropertyLocation(Key('opt-x', string_type), Location('environment variables'), 'OPT-X'),
    ]


def test_environment_missing(environ):
    subject = EnvironmentVariables(environ, prefix='APP_')

    with pytest.raises(Misconfiguration) as e:
        subject[Key('db.user', string_type)]

    assert str(e.value) == 'db.user property not found; searched:\n - APP_DB_USER in environment variables\n'


def test_environment_without_prefix(environ):
    subject = EnvironmentVariables(environ)

    assert subject[Key('home', string_type)] == '/home/user'
    assert subject[Key('other.db.password', string_type)] == 'other'
    assert subject.list() == [(Location('environment variables'), environ)]


def test_environment_list(environ):
    subject = EnvironmentVariables(environ, prefix='APP_')

    assert subject.list() == [(Location('environment variables'), {
        'APP_DB_PASSWORD': 'secret',
        'APP_DB_HOST': 'localhost',
        'APP_HTTP_PORT': '8080',
        'APP_CACHE_MAX-SIZE': '20',
    })]


def test_environment_is_a_snapshot(environ):
    subject = EnvironmentVariables(environ, prefix='APP_')
    environ['APP_DB_USER'] = 'user'

    assert Key('db.user', string_type) not in subject


def test_environment_logging(environ, caplog):
    with caplog.at_level(logging.INFO, logger='strata.sources'):
        EnvironmentVariables(environ, prefix='APP_')

    assert 'reading configuration from 4 APP_* environment variables' in caplog.messages
