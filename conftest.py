import pytest

from slotstream.pool import SessionPool
from slotstream.pool import use_pool


def pytest_addoption(parser):
    parser.addoption(
        '--run-benchmarks',
        action='store_true', default=False, help='Run benchmarks')


def pytest_collection_modifyitems(config, items):
    if config.getoption('--run-benchmarks'):
        return
    skip_benchmark = pytest.mark.skip(
        reason='Needs --run-benchmark to run benchmarks')

    for item in items:
        if 'benchmark' in item.keywords:
            item.add_marker(skip_benchmark)


@pytest.fixture(autouse=True, scope='function')
def isolated_session_pool():
    """Layers a fresh, empty session pool over the process-wide one for
    the duration of each test, so that sessions retired by one test
    can never leak into another. Tests that need to inspect the pool
    can request this fixture directly.
    """
    pool = SessionPool()
    with use_pool(pool):
        yield pool


@pytest.fixture
def anyio_backend():
    return 'asyncio'
