import pytest

from helpers import make_campaign, make_pipeline


@pytest.fixture
def campaign():
    return make_campaign()


@pytest.fixture
def pipeline():
    return make_pipeline()
