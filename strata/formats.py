import json
import re
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from os import PathLike
from pathlib import Path

import tomlkit
import yaml
from tomlkit.exceptions import TOMLKitError

from strata.utils import flatten_keys


@dataclass(frozen=True)
class Format(ABC):
    """
    Base class for implementing various property document formats.

    A format reads a document into a flat mapping of property names to raw
    string values, the input of a `.ConfigurationProperties`. Structured
    formats have their nested keys joined into dotted names. Malformed
    documents are signalled by raising `ValueError`. Note that a `Format` data
    class will also contain at least `suffix` and `encoding` attributes used
    by the I/O functions in `strata.io`.
    """

    suffix: str = ''  #: file name suffix of documents in this format
    encoding: str = 'utf-8'  #: text encoding of documents read from files

    def load(self, fp: typing.TextIO) -> typing.Dict[str, str]:
        return self.loads(fp.read())

    @abstractmethod
    def loads(self, string: str) -> typing.Dict[str, str]:
        raise NotImplementedError

    def loadf(self, fpath: str | PathLike, encoding: str | None = None) -> typing.Dict[str, str]:
        with Path(fpath).open('rt', encoding=encoding or self.encoding) as fp:
            return self.load(fp)

    def __call__(self, **kwargs: typing.Any) -> 'Format':
        """
        Derive a `Format` from this one, replacing the fields named in
        *kwargs*, e.g. ``YAML(suffix='.yml')``.

        :param kwargs: the fields to replace
        :return: the derived `Format`
        """
        return replace(self, **kwargs)


# escape sequences in keys and values, \uXXXX or a backslash followed by any single character
_ESCAPE = re.compile(r'\\(u[0-9A-Fa-f]{4}|u|.)', re.DOTALL)
_ESCAPED = {'t': '\t', 'n': '\n', 'r': '\r', 'f': '\f'}
_WHITESPACE = ' \t\f'


def _unescape(string: str) -> str:
    def replacement(match: re.Match[str]) -> str:
        escaped = match.group(1)
        if escaped == 'u':
            raise ValueError(f'malformed \\uxxxx encoding in {string}')
        if escaped.startswith('u'):
            return chr(int(escaped[1:], 16))
        return _ESCAPED.get(escaped, escaped)

    return _ESCAPE.sub(replacement, string)


def _continues(line: str) -> bool:
    # a line continues on the next when it ends with an odd number of backslashes
    return (len(line) - len(line.rstrip('\\'))) % 2 == 1


def _logical_lines(string: str) -> typing.Iterator[str]:
    lines = iter(string.splitlines())
    for line in lines:
        line = line.lstrip(_WHITESPACE)
        if not line or line[0] in '#!':
            # blank or comment line, nothing to see here
            continue

        while _continues(line):
            # drop the backslash and the leading whitespace of the continuation line
            line = line[:-1] + next(lines, '').lstrip(_WHITESPACE)

        yield line


def _split_property(line: str) -> typing.Tuple[str, str]:
    end = 0
    while end < len(line) and line[end] not in f'=:{_WHITESPACE}':
        # skip over escaped characters, which can't terminate the key
        end += 2 if line[end] == '\\' else 1

    key, value = line[:end], line[end:].lstrip(_WHITESPACE)
    if value[:1] in ('=', ':'):
        value = value[1:].lstrip(_WHITESPACE)

    return _unescape(key), _unescape(value)


@dataclass(frozen=True)
class _PropertiesFormat(Format):
    suffix: str = '.properties'  #: suffix of properties files

    def loads(self, string: str) -> typing.Dict[str, str]:
        return dict(_split_property(line) for line in _logical_lines(string))


def _flatten_document(document: typing.Any, format_name: str) -> typing.Dict[str, str]:
    if document is None:
        # empty document (or just comments)
        return {}
    if not isinstance(document, typing.Mapping):
        raise ValueError(f'{format_name} document does not contain a mapping of properties')

    return flatten_keys(document)


@dataclass(frozen=True)
class _JSONFormat(Format):
    suffix: str = '.json'  #: suffix of JSON documents

    def loads(self, string: str) -> typing.Dict[str, str]:
        # NB: json.JSONDecodeError is a ValueError
        return _flatten_document(json.loads(string), 'JSON')


@dataclass(frozen=True)
class _TOMLFormat(Format):
    suffix: str = '.toml'  #: suffix of TOML documents

    def loads(self, string: str) -> typing.Dict[str, str]:
        try:
            # unwrap tomlkit's items into plain Python values
            document = tomlkit.loads(string).unwrap()
        except TOMLKitError as e:
            raise ValueError(f'invalid TOML document: {e}') from e

        return _flatten_document(document, 'TOML')


@dataclass(frozen=True)
class _YAMLFormat(Format):
    suffix: str = '.yaml'  #: suffix of YAML documents

    def loads(self, string: str) -> typing.Dict[str, str]:
        try:
            document = yaml.safe_load(string)
        except yaml.YAMLError as e:
            raise ValueError(f'invalid YAML document: {e}') from e

        return _flatten_document(document, 'YAML')


# the formats are used as instances, derive variants by calling them (see Format.__call__)
PROPERTIES: Format = _PropertiesFormat(suffix='.properties', encoding='utf-8')
JSON: Format = _JSONFormat(suffix='.json', encoding='utf-8')
TOML: Format = _TOMLFormat(suffix='.toml', encoding='utf-8')
YAML: Format = _YAMLFormat(suffix='.yaml', encoding='utf-8')


__all__ = (
    'Format',
    'JSON',
    'PROPERTIES',
    'TOML',
    'YAML',
)
