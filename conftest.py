"""
Root conftest.py for pytest configuration

Pins the environment before any application module reads settings, and
registers the markers used across the suite.
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("ENABLE_EMAILS", "false")


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests spanning several components")
    config.addinivalue_line("markers", "critical: tests guarding payment correctness")
