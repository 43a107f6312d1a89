import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from functools import reduce
from itertools import chain
from os import PathLike
from pathlib import Path

from strata.exceptions import Misconfiguration


T = typing.TypeVar('T')

# raw properties as reported by a single source: names as used in that source, mapped to unparsed values
RawProperties = typing.Mapping[str, str]


@dataclass(frozen=True)
class Key(typing.Generic[T]):
    """
    A key that identifies a named, typed property and can convert a raw
    string into a value of that type.

    Keys are typically declared as constants and used to look up values:

    .. code-block:: python

        RETRY_COUNT = Key('connection.retry-count', int_type)

        retry_count = config[RETRY_COUNT]

    Two keys identify the same property when their names are equal, the
    parser does not take part in comparisons.
    """

    name: str
    parse: typing.Callable[['PropertyLocation', str], T] = field(compare=False, repr=False)

    def renamed(self, name: str) -> 'Key[T]':
        """
        Derive a key for another name, sharing the parser of this key.

        :param name: the name of the derived key
        :return: a new `Key` named *name*
        """
        return replace(self, name=name)


@dataclass(frozen=True)
class Location:
    """
    Describes the location of configuration information. A location may or
    may not have a URI, values compiled into the application or obtained from
    ephemeral data (the process environment, command-line parameters) have
    none.
    """

    description: str
    uri: str | None = None

    #: location of values compiled into the application
    INTRINSIC: typing.ClassVar['Location']

    @classmethod
    def from_path(cls, path: str | PathLike) -> 'Location':
        path = Path(path).absolute()
        return cls(str(path), path.as_uri())


Location.INTRINSIC = Location('intrinsic')


@dataclass(frozen=True)
class PropertyLocation:
    """
    Where a value for *key* was (or would be) found: the *source* location and
    the literal name of the property within that source, e.g. ``--db-password``
    or ``APP_DB_PASSWORD``.
    """

    key: Key[typing.Any]
    source: Location
    name_in_location: str

    @property
    def description(self) -> str:
        return f'{self.name_in_location} in {self.source.description}'


def describe(locations: typing.Iterable[PropertyLocation]) -> str:
    """
    Describe *locations* one per line, as used in error messages.

    :param locations: the locations to describe, in priority order
    :return: a multi-line description of *locations*
    """
    return ''.join(f' - {location.description}\n' for location in locations)


class Configuration(ABC):
    """
    Looks up configured properties by `Key`.

    Implementations hold no mutable state after construction, looking up the
    same key twice yields the same value from the same location.
    """

    @abstractmethod
    def get_or_none(self, key: Key[T]) -> T | None:
        """
        Look up a value for *key*.

        :param key: the key to look up
        :return: the parsed value for *key*, or `None` when the property is
            not defined
        :raises Misconfiguration: when a value is defined but cannot be parsed
        """
        raise NotImplementedError

    @abstractmethod
    def search_path(self, key: Key[typing.Any]) -> typing.List[PropertyLocation]:
        """
        Report the locations that will be searched for a value for *key*, in
        priority order. The value used is taken from the first location in
        the list that defines the property.
        """
        raise NotImplementedError

    @abstractmethod
    def location_of(self, key: Key[typing.Any]) -> PropertyLocation | None:
        """
        Report the location the value for *key* is taken from.

        :param key: the key to look up
        :return: the location of the value for *key*, or `None` when the
            property is not defined
        """
        raise NotImplementedError

    @abstractmethod
    def list(self) -> typing.List[typing.Tuple[Location, RawProperties]]:
        """
        List the raw contents of the sources of this configuration, one
        entry per source, in priority order.
        """
        raise NotImplementedError

    def get(self, key: Key[T]) -> T:
        """
        Look up a value for *key*.

        :param key: the key to look up
        :return: the parsed value for *key*
        :raises Misconfiguration: when the property is not defined in any of
            the searched locations, or its value cannot be parsed
        """
        value = self.get_or_none(key)
        if value is None:
            raise Misconfiguration(f'{key.name} property not found; searched:\n{describe(self.search_path(key))}')
        return value

    def get_or_else(
        self,
        key: Key[T],
        default: T | None = None,
        *,
        default_factory: typing.Callable[[Key[T]], T] | None = None,
    ) -> T | None:
        """
        Look up a value for *key*, falling back to a default when the property
        is not defined.

        :param key: the key to look up
        :param default: value to return when the property is not defined
        :param default_factory: callable to create a default value from
            *key*, takes precedence over *default*
        :return: the parsed value for *key*, or the default
        :raises Misconfiguration: when a value is defined but cannot be parsed
        """
        value = self.get_or_none(key)
        if value is not None:
            return value
        if default_factory is not None:
            return default_factory(key)
        return default

    def contains(self, key: Key[typing.Any]) -> bool:
        return self.get_or_none(key) is not None

    def overriding(self, fallback: 'Configuration | None') -> 'Configuration':
        """
        Layer this configuration over *fallback*.

        :param fallback: configuration to look up properties not defined in
            this configuration, can be `None`
        :return: an `Override`, or this configuration if *fallback* is `None`
        """
        return self if fallback is None else Override(self, fallback)

    def __getitem__(self, key: Key[T]) -> T:
        return self.get(key)

    def __contains__(self, key: Key[typing.Any]) -> bool:
        return self.contains(key)


class LocatedConfiguration(Configuration):
    """
    Base class for a `Configuration` read from a single source at a known
    `Location`. Subclasses decide how a key is named in their source and how
    a raw value is looked up by that name.
    """

    location: Location

    def name_in_location(self, key: Key[typing.Any]) -> str:
        return key.name

    @abstractmethod
    def lookup(self, name: str) -> str | None:
        """
        Look up the raw value of a property by the name it has in this
        source.
        """
        raise NotImplementedError

    def property_location(self, key: Key[typing.Any]) -> PropertyLocation:
        return PropertyLocation(key, self.location, self.name_in_location(key))

    def get_or_none(self, key: Key[T]) -> T | None:
        location = self.property_location(key)
        value = self.lookup(location.name_in_location)
        return None if value is None else key.parse(location, value)

    def contains(self, key: Key[typing.Any]) -> bool:
        return self.lookup(self.name_in_location(key)) is not None

    def search_path(self, key: Key[typing.Any]) -> typing.List[PropertyLocation]:
        return [self.property_location(key)]

    def location_of(self, key: Key[typing.Any]) -> PropertyLocation | None:
        return self.property_location(key) if self.contains(key) else None


class Override(Configuration):
    """
    Looks up properties in *override* and, if a property is not defined
    there, in *fallback*.
    """

    def __init__(self, override: Configuration, fallback: Configuration):
        self.override = override
        self.fallback = fallback

    def get_or_none(self, key: Key[T]) -> T | None:
        value = self.override.get_or_none(key)
        return self.fallback.get_or_none(key) if value is None else value

    def contains(self, key: Key[typing.Any]) -> bool:
        return self.override.contains(key) or self.fallback.contains(key)

    def search_path(self, key: Key[typing.Any]) -> typing.List[PropertyLocation]:
        return self.override.search_path(key) + self.fallback.search_path(key)

    def location_of(self, key: Key[typing.Any]) -> PropertyLocation | None:
        if self.override.contains(key):
            return self.override.location_of(key)
        return self.fallback.location_of(key)

    def list(self) -> typing.List[typing.Tuple[Location, RawProperties]]:
        return self.override.list() + self.fallback.list()

    def __repr__(self) -> str:
        return f'{self.__class__.__module__}.{self.__class__.__name__}({self.override!r}, {self.fallback!r})'


def overriding(configuration: Configuration, *fallbacks: Configuration | None) -> Configuration:
    """
    Chain *configuration* and *fallbacks* into a single configuration,
    looking up properties left to right: ``overriding(a, b, c)`` is
    equivalent to ``a.overriding(b.overriding(c))``. `None` values in
    *fallbacks* are skipped.

    :param configuration: the most significant configuration
    :param fallbacks: configurations of decreasing significance
    :return: the chained configuration
    """
    fallback = reduce(lambda chained, next_fallback: next_fallback.overriding(chained),
                      reversed([fallback for fallback in fallbacks if fallback is not None]),
                      None)
    return configuration.overriding(fallback)


class Subset(Configuration):
    """
    A subset of a larger set of configuration properties.

    A *prefix* and ``.`` separator is prepended and/or a ``.`` separator and
    *suffix* are appended to the names of keys looked up in this
    configuration, the renamed keys are then looked up in *configuration*.
    For a *prefix* of ``db``, a key named ``password`` is looked up in
    *configuration* as ``db.password``.
    """

    def __init__(self, configuration: Configuration, prefix: str | None = None, suffix: str | None = None):
        if not prefix and not suffix:
            raise ValueError('subset requires a prefix, a suffix or both')

        self._configuration = configuration
        self._prefix = f'{prefix}.' if prefix else ''
        self._suffix = f'.{suffix}' if suffix else ''

    def _renamed(self, key: Key[T]) -> Key[T]:
        return key.renamed(f'{self._prefix}{key.name}{self._suffix}')

    def _matches(self, name: str) -> bool:
        # the name in between prefix and suffix can't be empty
        return (name.startswith(self._prefix) and name.endswith(self._suffix)
                and len(name) > len(self._prefix) + len(self._suffix))

    def get_or_none(self, key: Key[T]) -> T | None:
        return self._configuration.get_or_none(self._renamed(key))

    def contains(self, key: Key[typing.Any]) -> bool:
        return self._configuration.contains(self._renamed(key))

    def search_path(self, key: Key[typing.Any]) -> typing.List[PropertyLocation]:
        return self._configuration.search_path(self._renamed(key))

    def location_of(self, key: Key[typing.Any]) -> PropertyLocation | None:
        return self._configuration.location_of(self._renamed(key))

    def list(self) -> typing.List[typing.Tuple[Location, RawProperties]]:
        # report the entries of the underlying sources that feed this subset, under their own locations
        return [
            (location, {name: value for name, value in properties.items() if self._matches(name)})
            for location, properties in self._configuration.list()
        ]

    def __repr__(self) -> str:
        return (f'{self.__class__.__module__}.{self.__class__.__name__}('
                f'{self._configuration!r}, prefix={self._prefix[:-1] or None!r}, suffix={self._suffix[1:] or None!r})')


class Search(Configuration):
    """
    Looks up properties in a list of configurations, in order. The first
    configuration that defines a property provides its value.
    """

    def __init__(self, *configurations: Configuration):
        self._configurations = configurations

    def _first(self, key: Key[typing.Any]) -> Configuration | None:
        return next((configuration for configuration in self._configurations if configuration.contains(key)), None)

    def get_or_none(self, key: Key[T]) -> T | None:
        configuration = self._first(key)
        return None if configuration is None else configuration.get_or_none(key)

    def contains(self, key: Key[typing.Any]) -> bool:
        return self._first(key) is not None

    def search_path(self, key: Key[typing.Any]) -> typing.List[PropertyLocation]:
        return [*chain.from_iterable(configuration.search_path(key) for configuration in self._configurations)]

    def location_of(self, key: Key[typing.Any]) -> PropertyLocation | None:
        configuration = self._first(key)
        return None if configuration is None else configuration.location_of(key)

    def list(self) -> typing.List[typing.Tuple[Location, RawProperties]]:
        return [*chain.from_iterable(configuration.list() for configuration in self._configurations)]

    def __repr__(self) -> str:
        configurations = ', '.join(repr(configuration) for configuration in self._configurations)
        return f'{self.__class__.__module__}.{self.__class__.__name__}({configurations})'


def search(*configurations: Configuration) -> Configuration:
    """
    Create a `Search` over *configurations*, ordered from most to least
    significant.
    """
    return Search(*configurations)
