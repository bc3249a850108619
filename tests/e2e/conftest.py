from collections.abc import AsyncIterator

import pytest_asyncio

from src.research.backends import RadioBrowserDirectory


@pytest_asyncio.fixture
async def station_directory() -> AsyncIterator[RadioBrowserDirectory]:
    """Live Radio Browser directory for e2e/integration suites only."""
    directory = RadioBrowserDirectory()
    try:
        yield directory
    finally:
        await directory.close()
