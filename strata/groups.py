import typing

from strata.models import Key


T = typing.TypeVar('T')


class PropertyGroup:
    """
    A named group of keys, sharing a dotted namespace.

    .. code-block:: python

        db = PropertyGroup('db')
        DB_HOST = db.key('host', string_type)  # Key('db.host', string_type)

        pool = db.group('pool')
        POOL_SIZE = pool.key('size', int_type)  # Key('db.pool.size', int_type)
    """

    def __init__(self, name: str, parent: 'PropertyGroup | None' = None):
        if not name:
            raise ValueError('property group requires a name')

        self.name = f'{parent.name}.{name}' if parent else name

    def key(self, name: str, parse: typing.Callable[..., T]) -> Key[T]:
        """
        Create a key for a property in this group.

        :param name: the name of the property within this group
        :param parse: the parser for the property's values
        :return: a `Key` named ``<group name>.<name>``
        """
        return Key(f'{self.name}.{name}', parse)

    def group(self, name: str) -> 'PropertyGroup':
        """
        Create a group nested in this group.

        :param name: the name of the nested group within this group
        :return: a `PropertyGroup` named ``<group name>.<name>``
        """
        return PropertyGroup(name, parent=self)

    def __repr__(self) -> str:
        return f'{self.__class__.__module__}.{self.__class__.__name__}({self.name!r})'
