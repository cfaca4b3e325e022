#-------------------------------------------------------------------------bh-
# pytest configuration and fixtures for the Valhalla console tests
#-------------------------------------------------------------------------eh-

import sys
from pathlib import Path

import pytest

# Add src and tests to path for imports
PROJ_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJ_ROOT / 'src'))
sys.path.insert(0, str(PROJ_ROOT / 'tests'))

from fixtures.backend import FakeBackend, make_token  # noqa: E402
from valhalla.session import MemoryTokenStore  # noqa: E402


@pytest.fixture
def backend():
    """
    In-process stand-in for the Valhalla REST API.

    Token validation succeeds by default; tests add the other routes they
    need with backend.add(method, path, body, status).
    """
    fake = FakeBackend()
    fake.add('GET', '/auth/validate-token', {'valid': True})
    return fake


@pytest.fixture
def token_factory():
    """Build signed session tokens: token_factory(role_id=1, ...)."""
    return make_token


@pytest.fixture
def token_store():
    return MemoryTokenStore()
