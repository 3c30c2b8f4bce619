"""
Pytest configuration and fixtures.
"""

import sys
import datetime
from pathlib import Path
import pytest
import pytest_asyncio

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from wk.infra.db import DatabaseEngine, Base


class FakeClock:
    """Settable clock returning epoch seconds"""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@pytest.fixture
def noon():
    """Epoch seconds for local noon on a fixed Wednesday, far from midnight"""
    return int(datetime.datetime(2026, 3, 11, 12, 0, 0).timestamp())


@pytest.fixture
def clock(noon):
    return FakeClock(noon)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a file-backed SQLite database for testing"""
    engine = DatabaseEngine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}")
    await engine.create_tables()

    yield engine

    async with engine.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def wk_home(tmp_path, monkeypatch):
    """Point the CLI at a throwaway data directory"""
    data_dir = tmp_path / "wk"
    monkeypatch.setenv("WK_DATA_DIR", str(data_dir))
    monkeypatch.delenv("WK_DATABASE_URL", raising=False)
    monkeypatch.delenv("WK_LOG_LEVEL", raising=False)
    return data_dir
