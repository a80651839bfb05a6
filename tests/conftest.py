"""Shared pytest fixtures for all tests."""
import pytest
from pathlib import Path

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def sample_dump_path():
    """Path to the sample e-commerce dump."""
    return FIXTURES_DIR / "sample_database.sql"


@pytest.fixture(scope="session")
def sample_dump(sample_dump_path):
    """Content of the sample e-commerce dump."""
    return sample_dump_path.read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch, tmp_path):
    """Keep a developer's own config file or env var out of the tests."""
    monkeypatch.delenv("SQLDUMP_ANALYZER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
