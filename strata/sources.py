import logging
import typing
from types import MappingProxyType

from strata.models import Key, LocatedConfiguration, Location, RawProperties


if typing.TYPE_CHECKING:
    from strata.formats import Format


LOG = logging.getLogger(__name__)


class ConfigurationMap(LocatedConfiguration):
    """
    Configuration stored in a mapping of property names to raw values.

    .. code-block:: python

        defaults = ConfigurationMap({'db.host': 'localhost', 'db.port': '5432'})
    """

    def __init__(self, properties: RawProperties | None = None, location: Location = Location.INTRINSIC):
        """
        Create a new `ConfigurationMap`.

        :param properties: raw property values by name (copied, later changes
            to *properties* are not reflected)
        :param location: the location the properties were taken from
        """
        self.location = location
        self._properties: RawProperties = MappingProxyType(dict(properties or {}))

    def lookup(self, name: str) -> str | None:
        return self._properties.get(name)

    def list(self) -> typing.List[typing.Tuple[Location, RawProperties]]:
        return [(self.location, self._properties)]

    def __repr__(self) -> str:
        keys = ', '.join(repr(key) for key in self._properties)
        return f'{self.__class__.__module__}.{self.__class__.__name__}(location={self.location.description!r}, keys=[{keys}])'


class ConfigurationProperties(ConfigurationMap):
    """
    Configuration read from a property document (a file, a package resource or
    a string), see `strata.io`.
    """

    def __init__(self,
                 properties: RawProperties | None = None,
                 location: Location = Location.INTRINSIC,
                 format: 'Format | None' = None):
        """
        Create a new `ConfigurationProperties`.

        :param properties: raw property values by name
        :param location: the location of the document
        :param format: the `.Format` the document was read with, if known
        """
        super().__init__(properties, location)
        self.format = format


class EnvironmentVariables(LocatedConfiguration):
    """
    Configuration looked up in environment variables.

    Key names are translated from the lower-case, dotted convention to the
    upper-case and underscore convention of environment variables, with an
    optional prefix. With a *prefix* of ``APP_``, the key name ``db.password``
    is looked up as ``APP_DB_PASSWORD``. Only dots are translated, other
    characters are kept as is: ``cache.max-size`` is ``APP_CACHE_MAX-SIZE``.

    The environment is passed explicitly, use ``EnvironmentVariables(os.environ)``
    for the environment of the current process.
    """

    def __init__(self, environ: typing.Mapping[str, str], prefix: str = ''):
        """
        Create a new `EnvironmentVariables`.

        :param environ: the environment to read, e.g. `os.environ` (copied,
            later changes to *environ* are not reflected)
        :param prefix: prefix of the environment variable names to look up
        """
        self.prefix = prefix
        self.location = Location('environment variables')
        self._environ = MappingProxyType(dict(environ))

        # include the number of variables matched for debugging purposes
        LOG.info(f'reading configuration from {len(self.list()[0][1])} {prefix}* environment variables')

    def name_in_location(self, key: Key[typing.Any]) -> str:
        return self.prefix + key.name.upper().replace('.', '_')

    def lookup(self, name: str) -> str | None:
        return self._environ.get(name)

    def list(self) -> typing.List[typing.Tuple[Location, RawProperties]]:
        # an empty prefix matches everything
        return [(self.location, {name: value for name, value in self._environ.items() if name.startswith(self.prefix)})]

    def __repr__(self) -> str:
        return f'{self.__class__.__module__}.{self.__class__.__name__}(prefix={self.prefix!r})'
