import pytest

from strata.formats import JSON, PROPERTIES, TOML, YAML


expected = {
    'key': 'value',
    'some.other.key': '1, 2, 3',
    'some.thing': 'false',
}


def test_format_instances():
    assert PROPERTIES.suffix == '.properties'
    assert JSON.suffix == '.json'
    assert TOML.suffix == '.toml'
    assert YAML.suffix == '.yaml'

    for format in (PROPERTIES, JSON, TOML, YAML):
        assert format.encoding == 'utf-8'


def test_format_call():
    subject = YAML(suffix='.yml')

    assert subject.suffix == '.yml'
    assert subject.encoding == YAML.encoding
    assert YAML.suffix == '.yaml'
    assert type(subject) is type(YAML)

    assert PROPERTIES(encoding='latin-1').encoding == 'latin-1'


def test_properties(test_files):
    subject = PROPERTIES.loadf(test_files / 'example.properties')

    assert subject == {
        'a': '1',
        'b': 'two',
        'c': 'three',
        'd': 'four',
        'long.value': 'first, second, third',
        'escaped key': 'tab\there',
        'unicode': 'café',
        'empty': '',
    }


def test_properties_empty(test_files):
    assert PROPERTIES.loadf(test_files / 'empty.properties') == {}
    assert PROPERTIES.loads('') == {}
    assert PROPERTIES.loads('# just a comment\n\n   ! and another\n') == {}


def test_properties_separators():
    assert PROPERTIES.loads('a=1\nb:2\nc 3\nd\t=\t4\ne  :  5') == {'a': '1', 'b': '2', 'c': '3', 'd': '4', 'e': '5'}
    # only the first separator counts
    assert PROPERTIES.loads('a=b=c\nd:e:f\ng h i') == {'a': 'b=c', 'd': 'e:f', 'g': 'h i'}


def test_properties_keys_without_values():
    assert PROPERTIES.loads('flag\nother=\n') == {'flag': '', 'other': ''}


def test_properties_escapes():
    assert PROPERTIES.loads(r'a\=b = c\:d') == {'a=b': 'c:d'}
    assert PROPERTIES.loads(r'path = C:\\temp\\new') == {'path': 'C:\\temp\\new'}
    assert PROPERTIES.loads(r'unicode = caf\u00e9') == {'unicode': 'café'}
    assert PROPERTIES.loads(r'lines = one\ntwo') == {'lines': 'one\ntwo'}
    # unknown escapes just drop the backslash
    assert PROPERTIES.loads(r'other = \q') == {'other': 'q'}


def test_properties_malformed_escape():
    with pytest.raises(ValueError):
        PROPERTIES.loads(r'broken = \u12')


def test_properties_continuation():
    assert PROPERTIES.loads('a = one \\\n    two\nb = three') == {'a': 'one two', 'b': 'three'}
    # an escaped backslash at the end of a line is not a continuation
    assert PROPERTIES.loads('a = one\\\\\nb = two') == {'a': 'one\\', 'b': 'two'}
    # a continuation on the last line continues into nothing
    assert PROPERTIES.loads('a = one\\') == {'a': 'one'}


def test_properties_later_values_win():
    assert PROPERTIES.loads('a = 1\na = 2') == {'a': '2'}


def test_structured_documents(test_files):
    assert JSON.loadf(test_files / 'config.json') == expected
    assert TOML.loadf(test_files / 'config.toml') == expected
    assert YAML.loadf(test_files / 'config.yaml') == expected
    # JSON is valid YAML
    assert YAML.loadf(test_files / 'config.json') == expected


def test_structured_documents_load(test_files):
    for format, name in ((JSON, 'config.json'), (TOML, 'config.toml'), (YAML, 'config.yaml')):
        with (test_files / name).open() as fp:
            assert format.load(fp) == expected


def test_structured_empty(test_files):
    assert YAML.loadf(test_files / 'comments.yaml') == {}
    assert YAML.loads('') == {}
    assert TOML.loads('') == {}
    assert JSON.loads('{}') == {}


def test_structured_values():
    assert YAML.loads('nothing:\nnumber: 4.5\nnested: {enabled: true}') == {
        'nothing': '',
        'number': '4.5',
        'nested.enabled': 'true',
    }
    assert JSON.loads('{"servers": [{"host": "a"}, {"host": "b", "port": 80}]}') == {
        'servers.0.host': 'a',
        'servers.1.host': 'b',
        'servers.1.port': '80',
    }


@pytest.mark.parametrize('format,name', (
    (YAML, 'malformed.yaml'),
    (JSON, 'malformed.json'),
    (TOML, 'malformed.yaml'),
    (YAML, 'list.yaml'),
))
def test_malformed(test_files, format, name):
    with pytest.raises(ValueError):
        format.loadf(test_files / name)
