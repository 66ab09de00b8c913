"""Pytest configuration for Bakery CMS."""


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: test runs a full scenario against a real database"
    )
