"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    config,
    fetcher,
    mock_contract,
    sample_metadata,
    test_console,
)
