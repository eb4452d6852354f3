"""
Pytest configuration and fixtures for the crane digital twin test suite.
"""

import os
import sys

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'backend'))


@pytest.fixture
def crane():
    """Crane with the default geometry."""
    from crane import Crane
    return Crane()


@pytest.fixture
def unit_crane():
    """Crane with unit link lengths for IK reachability tests."""
    from crane import Crane
    return Crane(d2_max=2.0, d3=0.0, d4=0.0, r3=1.0, r4=1.0)


@pytest.fixture
def shared(crane):
    """Shared state wrapping the default crane."""
    from crane import SharedState
    return SharedState(crane)


@pytest.fixture
def router(shared):
    from crane import CommandRouter
    return CommandRouter(shared)
