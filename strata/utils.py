from collections.abc import Mapping, Sequence
import typing

from strata.exceptions import Misconfiguration


def to_property(value: typing.Any) -> str:
    """
    Renders *value* as a raw property value, the way it would be written in a
    properties file.

    :param value: a scalar or sequence value, as read from a structured
        document
    :return: the raw string for *value*
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        # match the literals accepted by boolean_type rather than Python's True / False
        return 'true' if value else 'false'
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        # join sequences the way list_type splits them by default
        return ', '.join(to_property(element) for element in value)

    return str(value)


def _is_nested(value: typing.Any) -> bool:
    # a sequence is only nested when it contains mappings, other sequences are rendered as a single value
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and any(
        isinstance(element, Mapping) for element in value
    )


def flatten_keys(mapping: typing.Mapping[str, typing.Any], prefix: str | None = None) -> typing.Dict[str, str]:
    """
    Recursively walks *mapping* to join the keys of nested mappings into
    dotted names, rendering the values as raw property values.

    .. note::

        Keys not of type `str` are not supported and will raise errors.

    :param mapping: the mapping to process
    :param prefix: the dotted name of *mapping* itself (should only need to be
        provided by recursive calls)
    :return: a flat mapping of dotted names to raw values
    :raises Misconfiguration: when a single dotted name is given different
        values, e.g. both ``{'a.b': 1}`` and ``{'a': {'b': 2}}``
    """
    result: typing.Dict[str, str] = {}

    for key, value in mapping.items():
        # reject non-str keys, avoid complicating access patterns
        if not isinstance(key, str):
            raise ValueError(f'non-str type keys ({key}, {key.__class__.__module__}.{key.__class__.__name__}) '
                             'not supported')

        name = f'{prefix}.{key}' if prefix else key
        if isinstance(value, Mapping):
            # recursively flatten key(s) in value
            items = flatten_keys(value, name).items()
        elif _is_nested(value):
            # address elements of a sequence of mappings by their index
            items = flatten_keys({str(index): element for index, element in enumerate(value)}, name).items()
        else:
            items = {name: to_property(value)}.items()

        for name, raw in items:
            if result.get(name, raw) != raw:
                raise Misconfiguration(f'conflicting values for {name}: {result[name]}, {raw}')
            result[name] = raw

    return result
