from pathlib import Path

import pytest

from strata import Key, Location, PropertyLocation


@pytest.fixture(scope='session')
def test_files():
    return Path(__file__).parent / 'files'


@pytest.fixture
def location():
    def create(parser):
        return PropertyLocation(Key('passed-property-key', parser), Location('source-location'), 'property-key-in-source')

    return create
