import pytest

from duckpyground.engine import connect
from duckpyground.settings import get_settings


@pytest.fixture
def db():
    with connect() as database:
        yield database


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
