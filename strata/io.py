import logging
import typing
from enum import IntEnum
from functools import partial
from importlib import resources
from itertools import product
from os import PathLike, pathsep
from pathlib import Path

from strata.exceptions import Misconfiguration
from strata.formats import PROPERTIES, Format
from strata.models import Configuration, Location, Search
from strata.sources import ConfigurationProperties, EnvironmentVariables


LOG = logging.getLogger(__name__)


# sentinel for loadf's default, None is a perfectly good default (the loaders use it), shows up as '(raise)' in docs
NoDefault = type(
    'NoDefault',
    (object,),
    {
        '__repr__': lambda self: '(raise)',
        '__str__': lambda self: '(raise)',
    },
)()


def _parse(read: typing.Callable[[], typing.Dict[str, str]], location: Location) -> typing.Dict[str, str]:
    try:
        return read()
    except ValueError as e:
        # formats signal malformed documents with ValueError
        raise Misconfiguration(f'unable to read properties from {location.description}: {e}') from e


def load(fp: typing.TextIO, format: Format = PROPERTIES, location: Location = Location.INTRINSIC) -> ConfigurationProperties:
    """
    Read a `ConfigurationProperties` instance from a file-like object.

    :param fp: file-like object (supporting ``.read()``)
    :param format: document format to use
    :param location: the location to report for values read from *fp*
    :returns: a `ConfigurationProperties` instance providing values from *fp*
    :raises Misconfiguration: when the contents of *fp* are malformed
    """
    return ConfigurationProperties(_parse(partial(format.load, fp), location), location, format)


def loads(string: str, format: Format = PROPERTIES, location: Location = Location.INTRINSIC) -> ConfigurationProperties:
    """
    Read a `ConfigurationProperties` instance from a string.

    :param string: document contents
    :param format: document format to use
    :param location: the location to report for values read from *string*
    :returns: a `ConfigurationProperties` instance providing values from
        *string*
    :raises Misconfiguration: when *string* is malformed
    """
    return ConfigurationProperties(_parse(partial(format.loads, string), location), location, format)


def loadf(fname: str | PathLike, format: Format = PROPERTIES, default: typing.Any = NoDefault) -> typing.Any:
    """
    Read a `ConfigurationProperties` instance from a named file.

    :param fname: name of the file to read, ``~`` is expanded to the user's
        home directory
    :param format: document format to use
    :param default: value to return when the file does not exist or cannot
        be read (default is to raise a `Misconfiguration`)
    :returns: a `ConfigurationProperties` instance providing values from
        *fname*, or *default*
    :raises Misconfiguration: when the file cannot be read and no *default*
        was provided, or the file is malformed
    """
    # formats open the path they're given, ~ is expanded here
    fpath = Path(fname).expanduser()
    location = Location.from_path(fpath)

    try:
        properties = _parse(partial(format.loadf, fpath), location)
    except OSError as e:
        # missing or unreadable
        if default is not NoDefault:
            LOG.debug(f'unable to read configuration from file {fpath}')
            return default

        if isinstance(e, FileNotFoundError):
            raise Misconfiguration(f'file {fpath} does not exist') from e
        raise Misconfiguration(f'unable to read file {fpath}') from e

    LOG.debug(f'read {len(properties)} properties from file {fpath}')
    return ConfigurationProperties(properties, location, format)


def load_resource(package: str, resource: str, format: Format = PROPERTIES) -> ConfigurationProperties:
    """
    Read a `ConfigurationProperties` instance from a resource shipped with a
    Python package.

    :param package: name of the package containing *resource*, e.g.
        ``'my_application.config'``
    :param resource: name of the resource, relative to *package*
    :param format: document format to use
    :returns: a `ConfigurationProperties` instance providing values from
        *resource*
    :raises Misconfiguration: when the resource does not exist or is
        malformed
    """
    try:
        traversable = resources.files(package).joinpath(resource)
        with traversable.open('rt', encoding=format.encoding) as fp:
            contents = fp.read()
    except (ModuleNotFoundError, OSError) as e:
        raise Misconfiguration(f'resource {resource} not found') from e

    # resources in zip files and the like can't be addressed by a file URI
    uri = traversable.as_uri() if isinstance(traversable, Path) else None
    return loads(contents, format=format, location=Location(f'resource {resource}', uri))


# a loader reads configuration for a name, in a format, possibly depending on an environment
Loader = typing.Callable[[str, Format, typing.Mapping[str, str]], Configuration | None]


def read_xdg_config_dirs(name: str, format: Format, environ: typing.Mapping[str, str]) -> Configuration | None:
    """
    Read ``name.suffix`` from each of the system-wide configuration
    directories listed in ``XDG_CONFIG_DIRS`` (``/etc/xdg`` when unset).

    :param name: name of the application or set of properties
    :param format: document format to use
    :param environ: the environment holding ``XDG_CONFIG_DIRS``
    :returns: a `.Search` over the files found, in the order listed, `None`
        when none of the directories holds a file
    """
    # an unset or empty XDG_CONFIG_DIRS means /etc/xdg, see https://specifications.freedesktop.org/basedir-spec/latest/
    config_dirs = environ.get('XDG_CONFIG_DIRS') or '/etc/xdg'
    # listed most important first, which is the order a search wants them in
    candidates = (Path(config_dir) / f'{name}{format.suffix}' for config_dir in config_dirs.split(pathsep))
    found = [
        configuration
        for configuration in (loadf(candidate, format=format, default=None) for candidate in candidates)
        if configuration is not None
    ]
    return Search(*found) if found else None


def read_xdg_config_home(name: str, format: Format, environ: typing.Mapping[str, str]) -> Configuration | None:
    """
    Read ``name.suffix`` from the user's configuration directory, named by
    ``XDG_CONFIG_HOME`` (``$HOME/.config`` when unset).

    :param name: name of the application or set of properties
    :param format: document format to use
    :param environ: the environment holding ``XDG_CONFIG_HOME`` and ``HOME``
    :returns: a `Configuration`, `None` when there is no such file
    """
    config_home = environ.get('XDG_CONFIG_HOME')
    home = environ.get('HOME')
    # the home directory is taken from environ as well, ~ only when it doesn't name one
    config_home = Path(config_home) if config_home else Path(home or '~') / '.config'
    return loadf(config_home / f'{name}{format.suffix}', format=format, default=None)


def _envvar_name(name: str) -> str:
    return name.upper().replace('.', '_')


def read_envvars(name: str, format: Format, environ: typing.Mapping[str, str]) -> Configuration:
    """
    Read environment variables prefixed with ``NAME_``, see
    `.EnvironmentVariables`: key ``db.password`` of application ``my.app``
    is looked up as ``MY_APP_DB_PASSWORD``.

    :param name: name of the application or set of properties, determines
        the prefix
    :param format: unused, environment variables hold raw values
    :param environ: the environment to read
    :returns: an `.EnvironmentVariables` instance
    """
    return EnvironmentVariables(environ, prefix=f'{_envvar_name(name)}_')


def read_envvar_file(name: str, format: Format, environ: typing.Mapping[str, str]) -> Configuration | None:
    """
    Read the file named by environment variable ``NAME_CONFIG_FILE``.

    :param name: name of the application or set of properties
    :param format: document format to use
    :param environ: the environment holding ``NAME_CONFIG_FILE``
    :returns: a `Configuration`, `None` when the variable is not set
    :raises Misconfiguration: when the named file cannot be read, a file
        that is asked for explicitly is required to exist
    """
    config_file = environ.get(f'{_envvar_name(name)}_CONFIG_FILE')
    if not config_file:
        return None

    return loadf(config_file, format=format)


def read_envvar_dir(envvar: str, name: str, format: Format, environ: typing.Mapping[str, str]) -> Configuration | None:
    """
    Read ``name.suffix`` from the directory named by environment variable
    *envvar*, e.g. ``%APPDATA%\\my-app.properties`` for
    ``read_envvar_dir('APPDATA', 'my-app', PROPERTIES, environ)``.

    :param envvar: name of the environment variable holding a directory
    :param name: name of the application or set of properties
    :param format: document format to use
    :param environ: the environment holding *envvar*
    :returns: a `Configuration`, `None` when *envvar* is not set or there is
        no such file
    """
    directory = environ.get(envvar)
    if not directory:
        return None

    # loadf takes care of a leading ~ in the variable's value
    return loadf(Path(directory) / f'{name}{format.suffix}', format=format, default=None)


class Locality(IntEnum):
    """
    Groups of configuration locations, ordered from least to most specific.
    """

    SYSTEM = 0  #: shared by all users of the host, e.g. ``/etc/name.properties``
    USER = 1  #: owned by the current user, e.g. ``~/.name.properties``
    APPLICATION = 2  #: relative to the working directory of the application
    ENVIRONMENT = 3  #: the process environment


Loadable = str | Loader


_LOADERS: typing.Mapping[Locality, typing.Iterable[Loadable]] = {
    Locality.SYSTEM: (
        read_xdg_config_dirs,
        '/etc/{name}/{name}{suffix}',
        '/etc/{name}{suffix}',
        partial(read_envvar_dir, 'PROGRAMDATA'),
    ),
    Locality.USER: (
        read_xdg_config_home,
        partial(read_envvar_dir, 'APPDATA'),
        '~/.{name}{suffix}',
    ),
    Locality.APPLICATION: (
        './{name}{suffix}',
    ),
    Locality.ENVIRONMENT: (
        read_envvar_file,
        read_envvars,
    ),
}


def loaders(*specifiers: Locality | Loadable) -> typing.Iterable[Loadable]:
    """
    Expand *specifiers* into a load order for `load_name`.

    A `Locality` expands to the loaders of that locality, path templates
    (`str`, formatted with ``name`` and ``suffix``) and loader functions are
    passed through as is:

    .. code-block:: python

        load_order = loaders(Locality.SYSTEM,
                             '/opt/my-app/{name}{suffix}',
                             Locality.ENVIRONMENT)
        config = load_name('my-app', environ=os.environ, load_order=load_order)

    :param specifiers: localities, path templates or loader functions, in
        increasing significance
    :yields: path templates and loader functions
    """
    for specifier in specifiers:
        if isinstance(specifier, Locality):
            yield from _LOADERS[specifier]
        else:
            yield specifier


DEFAULT_LOAD_ORDER = tuple(loaders(*Locality))


def load_name(
    *names: str,
    environ: typing.Mapping[str, str],
    load_order: typing.Iterable[Loadable] = DEFAULT_LOAD_ORDER,
    format: Format = PROPERTIES,
) -> Configuration:
    """
    Find and read configuration for *names* from the locations in
    *load_order*. With the default load order, environment variables beat a
    file in the working directory, which beats ``~/.name.properties``, which
    beats the system-wide files.

    For each location, every name is tried before moving on to the next
    location: ``/etc/a.properties`` and ``/etc/b.properties`` are both less
    significant than ``./a.properties``.

    :param names: names of the application or sets of properties, in
        increasing significance
    :param environ: the environment to read, e.g. `os.environ`
    :param load_order: path templates and loader functions, in increasing
        significance, see `loaders`
    :param format: document format to use
    :returns: a `.Search` over the configuration found, most significant
        first
    """
    def read_all() -> typing.Iterable[Configuration | None]:
        for loadable, name in product(load_order, names):
            if callable(loadable):
                yield loadable(name, format, environ)
            else:
                path = Path(loadable.format(name=name, suffix=format.suffix))
                yield loadf(path, format=format, default=None)

    found = [configuration for configuration in read_all() if configuration is not None]
    LOG.debug(f'found {len(found)} configuration sources for {", ".join(names)}')

    return Search(*reversed(found))
