"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all tests in the test suite.
"""

import pytest
from pathlib import Path

import src.core.config as config_module
import src.core.error_logger as error_logger_module
from src.core.config import Config
from src.core.error_logger import ErrorLogger
from src.scraper.models import PlaceRecord
from src.scraper.traversal import TraversalLimits
from src.sessions.progress import ProgressChannel
from src.utils.retry import RetryConfig
from tests.fakes import FakePage, make_list_page


# ============================================================================
# Paths and Directories
# ============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def test_output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory for tests."""
    output_dir = tmp_path / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


# ============================================================================
# Configuration Isolation
# ============================================================================

@pytest.fixture(autouse=True)
def test_config(tmp_path: Path, monkeypatch) -> Config:
    """
    Global config pointing logs and outputs into tmp_path.

    Supabase is always disabled so no test reaches the network.
    """
    monkeypatch.setenv("SUPABASE_ENABLED", "0")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("BASE_OUT_DIR", str(tmp_path / "out"))
    monkeypatch.delenv("ERROR_LOG_FALLBACK_DIR", raising=False)

    config = Config(env_path=tmp_path / "missing.env")
    monkeypatch.setattr(config_module, "_config", config)
    return config


@pytest.fixture(autouse=True)
def error_logger(test_config: Config, tmp_path: Path, monkeypatch) -> ErrorLogger:
    """ErrorLogger singleton writing JSONL into tmp_path."""
    instance = ErrorLogger(fallback_dir=tmp_path / "errors")
    monkeypatch.setattr(error_logger_module, "_error_logger", instance)
    return instance


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_place() -> PlaceRecord:
    """Return a sample place record."""
    return PlaceRecord(
        name="Joe's Pizza",
        url="https://www.google.com/maps/place/Joe's+Pizza/@40.7,-73.9/data=!4m2!1s0x89c2:0x1a2b",
        address="7 Carmine St, New York, NY 10014",
        place_id="0x89c2:0x1a2b",
    )


@pytest.fixture
def sample_places() -> list:
    """Return three distinct place records."""
    return [
        PlaceRecord(name=f"Place {i}", url=f"https://www.google.com/maps/place/Place+{i}", place_id=f"0x{i}:0x{i}")
        for i in range(1, 4)
    ]


# ============================================================================
# Scraper Fixtures
# ============================================================================

@pytest.fixture
def snapshots() -> list:
    """List that records every emitted progress snapshot."""
    return []


@pytest.fixture
def channel(snapshots) -> ProgressChannel:
    """Progress channel appending snapshots to ``snapshots``."""
    return ProgressChannel(snapshots.append)


@pytest.fixture
def fast_limits() -> TraversalLimits:
    """Traversal limits with no retry backoff."""
    return TraversalLimits(navigation_retry=RetryConfig(max_retries=1, base_delay=0.001, max_delay=0.001))


@pytest.fixture
def list_page():
    """Factory for a fake list page with N distinct places."""
    def _make(count: int, **kwargs) -> FakePage:
        return make_list_page(count, **kwargs)
    return _make


# ============================================================================
# Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_supabase_client(monkeypatch):
    """Mock Supabase client for testing."""
    class MockTable:
        def __init__(self):
            self.data = []
            self.on_conflict = None

        def upsert(self, rows, on_conflict=None):
            self.data.extend(rows)
            self.on_conflict = on_conflict
            return self

        def insert(self, row):
            self.data.append(row)
            return self

        def execute(self):
            class Result:
                def __init__(self, data):
                    self.data = data
            return Result(self.data)

    class MockClient:
        def __init__(self):
            self.tables = {}

        def table(self, name: str):
            if name not in self.tables:
                self.tables[name] = MockTable()
            return self.tables[name]

    mock_client = MockClient()

    import src.db.supabase_client as supabase_module
    monkeypatch.setattr(supabase_module, "_client", mock_client)

    return mock_client


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
