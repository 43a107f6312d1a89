import re
import typing
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from urllib.parse import SplitResult, urlsplit
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from strata.exceptions import Misconfiguration
from strata.models import PropertyLocation


T = typing.TypeVar('T')
U = typing.TypeVar('U')

# a parser turns a raw value found at a location into a typed value, see PropertyType
Parser = typing.Callable[[PropertyLocation, str], T]


def invalid(location: PropertyLocation, type_name: str, value: str, detail: str | None = None) -> Misconfiguration:
    """
    Create the error for a raw *value* at *location* that is not a valid
    *type_name*.

    :param location: the location *value* was found at
    :param type_name: display name of the expected type
    :param value: the offending raw value
    :param detail: optional details to be appended to the message
    :return: a `Misconfiguration` to be raised by the caller
    """
    message = f'{location.source.description} {location.name_in_location} - invalid {type_name}: {value}'
    return Misconfiguration(f'{message} ({detail})' if detail else message)


def _describe_bounds(lower: typing.Any, upper: typing.Any) -> str:
    if lower is not None and upper is not None:
        return f'within [{lower}, {upper}]'
    elif lower is not None:
        return f'at least {lower}'
    else:
        return f'at most {upper}'


@dataclass(frozen=True)
class PropertyType(typing.Generic[T]):
    """
    A named parser, turning raw values into values of a particular type.
    Instances are callable as ``property_type(location, value)`` and can be
    used as the parser of a `.Key`.
    """

    name: str  #: display name of the parsed type, used in error messages
    parse: Parser[T] = field(repr=False)

    def __call__(self, location: PropertyLocation, value: str) -> T:
        return self.parse(location, value)

    def wrapped_as(self, wrap: typing.Callable[[T], U], name: str | None = None) -> 'PropertyType[U]':
        """
        Derive a type that applies *wrap* to values parsed by this type.

        :param wrap: callable creating the wrapped value from a parsed value
        :param name: display name of the derived type (defaults to the name of
            *wrap*)
        :return: the derived `PropertyType`
        """
        name = name or getattr(wrap, '__name__', 'value')

        def parse(location: PropertyLocation, value: str) -> U:
            parsed = self(location, value)
            try:
                return wrap(parsed)
            except Exception as e:
                raise invalid(location, name, value) from e

        return PropertyType(name, parse)

    def within(self, lower: typing.Any = None, upper: typing.Any = None) -> 'PropertyType[T]':
        """
        Derive a type that rejects values outside of the inclusive bounds
        *lower* and *upper*.

        :param lower: lowest acceptable value, or `None` when unbounded
        :param upper: highest acceptable value, or `None` when unbounded
        :return: the derived `PropertyType`
        """
        if lower is None and upper is None:
            raise ValueError('range requires a lower bound, an upper bound or both')

        name = f'{self.name} {_describe_bounds(lower, upper)}'

        def parse(location: PropertyLocation, value: str) -> T:
            parsed = self(location, value)
            if (lower is not None and parsed < lower) or (upper is not None and parsed > upper):
                raise invalid(location, name, value)
            return parsed

        return PropertyType(name, parse)


def property_type(
    convert: typing.Callable[[str], T],
    *errors: typing.Type[Exception],
    name: str | None = None,
) -> PropertyType[T]:
    """
    Create a `PropertyType` from a function converting a raw value,
    translating the errors it raises into `Misconfiguration`.

    :param convert: callable converting a raw value
    :param errors: exception types that signal an invalid raw value (defaults
        to `ValueError`), other exceptions propagate unchanged
    :param name: display name of the type (defaults to the name of *convert*)
    :return: a `PropertyType`
    """
    errors = errors or (ValueError,)
    name = name or getattr(convert, '__name__', 'value')

    def parse(location: PropertyLocation, value: str) -> T:
        try:
            return convert(value)
        except errors as e:
            raise invalid(location, name, value) from e

    return PropertyType(name, parse)


_INTEGER = re.compile(r'[+-]?[0-9]+')


def _integer(bits: int) -> typing.Callable[[str], int]:
    lower, upper = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def convert(value: str) -> int:
        if not _INTEGER.fullmatch(value):
            raise ValueError(f'not an integer: {value}')
        parsed = int(value)
        if not lower <= parsed <= upper:
            raise ValueError(f'{value} does not fit a signed {bits}-bit integer')
        return parsed

    return convert


# plain decimal notation only, float() itself also takes underscores and inf / nan spellings
_DOUBLE = re.compile(r'[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def _double(value: str) -> float:
    if not _DOUBLE.fullmatch(value):
        raise ValueError(f'not a decimal number: {value}')
    return float(value)


def _boolean(value: str) -> bool:
    # anything but true is false, matching how most property files are read
    return value.lower() == 'true'


_URI = re.compile(r"(?:[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[0-9A-Fa-f]{2})*")
_URI_SCHEME = re.compile(r'[A-Za-z][A-Za-z0-9+.\-]*')


def _uri(value: str) -> SplitResult:
    if not _URI.fullmatch(value):
        raise ValueError(f'illegal character in URI: {value}')

    scheme, colon, _ = value.partition(':')
    # a colon before any path, query or fragment delimiter terminates the scheme, which must then be valid
    if colon and not any(delimiter in scheme for delimiter in '/?#') and not _URI_SCHEME.fullmatch(scheme):
        raise ValueError(f'expected scheme name in URI: {value}')

    return urlsplit(value)


string_type: PropertyType[str] = property_type(str, name='str')
int_type: PropertyType[int] = property_type(_integer(32), name='int')
long_type: PropertyType[int] = property_type(_integer(64), name='long')
double_type: PropertyType[float] = property_type(_double, name='float')
boolean_type: PropertyType[bool] = property_type(_boolean, name='bool')
uri_type: PropertyType[SplitResult] = property_type(_uri, name='URI')


_DURATION = re.compile(
    r'(?P<sign>[-+]?)P(?:(?P<days>[-+]?[0-9]+)D)?'
    r'(?:T(?:(?P<hours>[-+]?[0-9]+)H)?(?:(?P<minutes>[-+]?[0-9]+)M)?(?:(?P<seconds>[-+]?[0-9]+(?:[.,][0-9]{0,9})?)S)?)?',
    re.IGNORECASE,
)
_PERIOD = re.compile(
    r'(?P<sign>[-+]?)P(?:(?P<years>[-+]?[0-9]+)Y)?(?:(?P<months>[-+]?[0-9]+)M)?'
    r'(?:(?P<weeks>[-+]?[0-9]+)W)?(?:(?P<days>[-+]?[0-9]+)D)?',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Period:
    """
    A date-based amount of time, like ``P1Y2M3D``. Unlike `timedelta`, the
    length of a period depends on the date it is applied to.
    """

    years: int = 0
    months: int = 0
    days: int = 0


def _duration(value: str) -> timedelta:
    match = _DURATION.fullmatch(value)
    # both P and T need to be followed by at least a single component
    if not match or value.upper().endswith(('P', 'T')):
        raise ValueError(f'not an ISO-8601 duration: {value}')

    duration = timedelta(
        days=int(match.group('days') or 0),
        hours=int(match.group('hours') or 0),
        minutes=int(match.group('minutes') or 0),
        seconds=float((match.group('seconds') or '0').replace(',', '.')),
    )
    return -duration if match.group('sign') == '-' else duration


def _period(value: str) -> Period:
    match = _PERIOD.fullmatch(value)
    if not match or value.upper().endswith('P'):
        raise ValueError(f'not an ISO-8601 period: {value}')

    sign = -1 if match.group('sign') == '-' else 1
    years, months, weeks, days = (int(match.group(unit) or 0) for unit in ('years', 'months', 'weeks', 'days'))
    return Period(years=sign * years, months=sign * months, days=sign * (weeks * 7 + days))


def _local(parse: typing.Callable[[str], T]) -> typing.Callable[[str], T]:
    def convert(value: str) -> T:
        parsed = parse(value)
        if getattr(parsed, 'tzinfo', None) is not None:
            raise ValueError(f'unexpected UTC offset in local value: {value}')
        return parsed

    return convert


def _instant(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f'missing UTC offset in instant: {value}')
    return parsed.astimezone(timezone.utc)


# NB: components that fit the pattern can still be too large for a timedelta, raising OverflowError
duration_type: PropertyType[timedelta] = property_type(_duration, ValueError, OverflowError, name='duration')
period_type: PropertyType[Period] = property_type(_period, name='period')
local_time_type: PropertyType[time] = property_type(_local(time.fromisoformat), name='local time')
local_date_type: PropertyType[date] = property_type(_local(date.fromisoformat), name='local date')
local_date_time_type: PropertyType[datetime] = property_type(_local(datetime.fromisoformat), name='local date-time')
instant_type: PropertyType[datetime] = property_type(_instant, ValueError, OverflowError, name='instant')
# NB: ZoneInfoNotFoundError is a KeyError, malformed keys raise ValueError, some names (directories, overly long
#     names) fail with an OSError when looked up in the zone database
time_zone_type: PropertyType[ZoneInfo] = property_type(ZoneInfo, ValueError, ZoneInfoNotFoundError, OSError,
                                                       name='time zone')


def enum_type(
    allowed: typing.Mapping[str, T] | typing.Type[T] | typing.Iterable[T],
    name: str | None = None,
) -> PropertyType[T]:
    """
    Create a type for an enumerated set of values.

    :param allowed: the values that can be configured, either as a mapping of
        the raw literals to their values, an `Enum` subclass or an iterable of
        `Enum` members (the latter two matched by member name)
    :param name: display name of the type (defaults to the name of the enum
        or the type of the mapped values)
    :return: a `PropertyType` accepting only the literals in *allowed*
    """
    if isinstance(allowed, type) and issubclass(allowed, Enum):
        name = name or allowed.__name__
        allowed = {member.name: member for member in allowed}
    elif not isinstance(allowed, typing.Mapping):
        allowed = {member.name: member for member in allowed}  # type: ignore

    literals: typing.Mapping[str, T] = dict(allowed)  # type: ignore
    if not name:
        value_types = {type(value).__name__ for value in literals.values()}
        name = value_types.pop() if len(value_types) == 1 else 'value'

    def parse(location: PropertyLocation, value: str) -> T:
        try:
            return literals[value]
        except KeyError as e:
            raise invalid(location, name, value, f'must be one of: {", ".join(literals)}') from e

    return PropertyType(name, parse)


_DEFAULT_SEPARATOR = re.compile(r',\s*')


def list_type(
    element_type: Parser[T],
    separator: str | re.Pattern[str] = _DEFAULT_SEPARATOR,
) -> PropertyType[typing.List[T]]:
    """
    Create a type for lists of values, separated by a regular expression.

    :param element_type: parser for the individual elements
    :param separator: regular expression matching the separators between
        elements (defaults to a comma followed by optional whitespace)
    :return: a `PropertyType` producing a `list`
    """
    separator = re.compile(separator)

    def parse(location: PropertyLocation, value: str) -> typing.List[T]:
        return [element_type(location, element) for element in separator.split(value)]

    return PropertyType(f'list of {getattr(element_type, "name", "value")}', parse)


def set_type(
    element_type: Parser[T],
    separator: str | re.Pattern[str] = _DEFAULT_SEPARATOR,
) -> PropertyType[typing.FrozenSet[T]]:
    """
    Create a type for sets of values, separated by a regular expression.
    Duplicate values are dropped.

    :param element_type: parser for the individual elements
    :param separator: regular expression matching the separators between
        elements (defaults to a comma followed by optional whitespace)
    :return: a `PropertyType` producing a `frozenset`
    """
    elements = list_type(element_type, separator)
    return PropertyType(f'set of {getattr(element_type, "name", "value")}',
                        lambda location, value: frozenset(elements(location, value)))
