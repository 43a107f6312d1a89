import logging
import sys
import typing
from dataclasses import dataclass

from strata.exceptions import Misconfiguration
from strata.models import Configuration, Key, Location, PropertyLocation, RawProperties


LOG = logging.getLogger(__name__)

T = typing.TypeVar('T')


@dataclass(frozen=True)
class CommandLineOption:
    """
    A command-line option setting the property identified by *key*.

    Flags are specified without leading dashes: the *long* flag defaults to
    the key's name with dots replaced by dashes (``db.host`` becomes
    ``--db-host``), the *short* flag is optional.
    """

    key: Key[typing.Any]
    long: str = None  # type: ignore  # defaults are derived from key in __post_init__
    short: str | None = None
    description: str = None  # type: ignore
    metavar: str = None  # type: ignore

    def __post_init__(self) -> None:
        # instances are frozen, derived defaults need to bypass __setattr__
        if self.long is None:
            object.__setattr__(self, 'long', self.key.name.replace('.', '-'))
        if self.description is None:
            object.__setattr__(self, 'description', f'set {self.key.name.replace(".", " ")}')
        if self.metavar is None:
            object.__setattr__(self, 'metavar', self.long.upper())

        if self.long.startswith('-'):
            raise ValueError("long flag must not be specified with leading '-'")
        if self.short is not None and self.short.startswith('-'):
            raise ValueError("short flag must not be specified with leading '-'")

    @property
    def long_flag(self) -> str:
        return f'--{self.long}'

    @property
    def short_flag(self) -> str | None:
        return f'-{self.short}' if self.short else None


class CommandLineProperty(typing.NamedTuple):
    flag_used: str
    value: str


class CommandLineConfiguration(Configuration):
    """
    Configuration set by command-line options, as produced by `parse_args`.
    Values are reported to be located at the flag actually used on the
    command line.
    """

    def __init__(self,
                 options: typing.Iterable[CommandLineOption],
                 used: typing.Mapping[Key[typing.Any], CommandLineProperty]):
        self.location = Location('command-line parameters')
        self._options = {option.key: option for option in options}
        self._used = dict(used)

    def get_or_none(self, key: Key[T]) -> T | None:
        location = self.location_of(key)
        return None if location is None else key.parse(location, self._used[key].value)

    def contains(self, key: Key[typing.Any]) -> bool:
        return key in self._used

    def search_path(self, key: Key[typing.Any]) -> typing.List[PropertyLocation]:
        option = self._options.get(key)
        if option is None:
            return []

        flags = (option.short_flag, option.long_flag) if option.short_flag else (option.long_flag,)
        return [PropertyLocation(key, self.location, flag) for flag in flags]

    def location_of(self, key: Key[typing.Any]) -> PropertyLocation | None:
        if key not in self._used:
            return None
        return PropertyLocation(key, self.location, self._used[key].flag_used)

    def list(self) -> typing.List[typing.Tuple[Location, RawProperties]]:
        return [(self.location, {used.flag_used: used.value for used in self._used.values()})]

    def __repr__(self) -> str:
        flags = ', '.join(repr(used.flag_used) for used in self._used.values())
        return f'{self.__class__.__module__}.{self.__class__.__name__}(flags=[{flags}])'


def _exit() -> typing.NoReturn:
    sys.exit(0)


def _option_for(options: typing.Mapping[str, CommandLineOption], flag: str, arg: str) -> CommandLineOption:
    try:
        return options[flag]
    except KeyError as e:
        raise Misconfiguration(f'unrecognised command-line option {arg}') from e


def parse_args(
    args: typing.Sequence[str],
    *options: CommandLineOption,
    fallback: Configuration | None = None,
    help_output: typing.TextIO | None = None,
    help_exit: typing.Callable[[], typing.Any] = _exit,
    program_name: str = '<program>',
    arg_metavar: str = 'FILE',
) -> typing.Tuple[Configuration, typing.List[str]]:
    """
    Parse command-line arguments into a configuration of the values set by
    *options* and a list of the remaining, positional arguments.

    Options can be passed as ``--long=value``, ``--long value`` or
    ``-s value``. When ``-h`` or ``--help`` is passed, usage is printed to
    *help_output* and *help_exit* is called.

    :param args: the command-line arguments, without the program name (e.g.
        ``sys.argv[1:]``)
    :param options: the options to recognise
    :param fallback: configuration to look up properties not set on the
        command line, can be `None`
    :param help_output: stream to print usage to (defaults to `sys.stderr`)
    :param help_exit: called after printing usage (defaults to exiting the
        process)
    :param program_name: name of the program, used in the usage text
    :param arg_metavar: name of the positional arguments, used in the usage
        text
    :return: a tuple of a `Configuration` and the positional arguments
    :raises Misconfiguration: when an unrecognised option is used or an
        option is missing its value
    """
    if '--help' in args or '-h' in args:
        print_help(help_output or sys.stderr, program_name, arg_metavar, options)
        help_exit()

    long_options = {option.long_flag: option for option in options}
    short_options = {option.short_flag: option for option in options if option.short_flag}

    positional = []
    used: typing.Dict[Key[typing.Any], CommandLineProperty] = {}

    arguments = iter(args)
    for arg in arguments:
        if arg.startswith('--') and '=' in arg:
            # --long=value, a single argument
            flag, _, value = arg.partition('=')
            used[_option_for(long_options, flag, arg).key] = CommandLineProperty(flag, value)
        elif arg.startswith('-'):
            # --long value or -s value, value is the next argument
            option = _option_for(long_options if arg.startswith('--') else short_options, arg, arg)
            value = next(arguments, None)
            if value is None:
                raise Misconfiguration(f'no argument for {arg} command-line option')
            used[option.key] = CommandLineProperty(arg, value)
        else:
            positional.append(arg)

    LOG.debug(f'parsed {len(used)} command-line options and {len(positional)} positional arguments')

    return CommandLineConfiguration(options, used).overriding(fallback), positional


def print_help(output: typing.TextIO,
               program_name: str,
               arg_metavar: str,
               options: typing.Iterable[CommandLineOption]) -> None:
    """
    Print usage of a program accepting *options* to *output*.
    """
    options = list(options)
    help_lines = [
        (f'-{option.short} {option.metavar}, ' if option.short else '') + f'--{option.long}={option.metavar}'
        for option in options
    ]
    descriptions = [option.description for option in options]
    help_lines.append('-h, --help')
    descriptions.append('show this help message and exit')

    width = max(len(line) for line in help_lines)

    print(f'Usage: {program_name} [options] {arg_metavar} ...', file=output)
    print(file=output)
    print('Options:', file=output)
    for line, description in zip(help_lines, descriptions):
        print(f'  {line.ljust(width)}  {description}', file=output)

    output.flush()
