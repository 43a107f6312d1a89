import logging
from collections.abc import Sequence

from strata.cli import CommandLineConfiguration, CommandLineOption, parse_args, print_help
from strata.exceptions import Misconfiguration
from strata.formats import JSON, PROPERTIES, TOML, YAML, Format
from strata.groups import PropertyGroup
from strata.io import DEFAULT_LOAD_ORDER, Locality, load, load_name, load_resource, loaders, loadf, loads
from strata.models import (
    Configuration,
    Key,
    LocatedConfiguration,
    Location,
    Override,
    PropertyLocation,
    Search,
    Subset,
    overriding,
    search,
)
from strata.sources import ConfigurationMap, ConfigurationProperties, EnvironmentVariables
from strata.types import (
    Period,
    PropertyType,
    boolean_type,
    double_type,
    duration_type,
    enum_type,
    instant_type,
    int_type,
    list_type,
    local_date_time_type,
    local_date_type,
    local_time_type,
    long_type,
    period_type,
    property_type,
    set_type,
    string_type,
    time_zone_type,
    uri_type,
)


__all__: Sequence[str] = sorted(
    {
        'CommandLineConfiguration',
        'CommandLineOption',
        'Configuration',
        'ConfigurationMap',
        'ConfigurationProperties',
        'DEFAULT_LOAD_ORDER',
        'EnvironmentVariables',
        'Format',
        'JSON',
        'Key',
        'Locality',
        'LocatedConfiguration',
        'Location',
        'Misconfiguration',
        'Override',
        'PROPERTIES',
        'Period',
        'PropertyGroup',
        'PropertyLocation',
        'PropertyType',
        'Search',
        'Subset',
        'TOML',
        'YAML',
        'boolean_type',
        'double_type',
        'duration_type',
        'enum_type',
        'instant_type',
        'int_type',
        'list_type',
        'load',
        'load_name',
        'load_resource',
        'loaders',
        'loadf',
        'loads',
        'local_date_time_type',
        'local_date_type',
        'local_time_type',
        'long_type',
        'overriding',
        'parse_args',
        'period_type',
        'print_help',
        'property_type',
        'search',
        'set_type',
        'string_type',
        'time_zone_type',
        'uri_type',
    }
)


# default strata' loggers to silence, can be overridden from logging later if needed
logging.getLogger(__name__).addHandler(logging.NullHandler())
