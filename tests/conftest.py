"""
Pytest configuration and shared fixtures for test suite.

Provides argparse-like namespaces for configuration tests. The scripted
git stand-in lives in tests/mocks/fake_repository.py.
"""

from types import SimpleNamespace

import pytest


@pytest.fixture
def make_args():
    """Factory for argparse-like namespaces where every option is unset."""
    def _make(**overrides):
        values = dict(
            branch_name=None,
            ignore_branch_prefix=None,
            tag_prefix=None,
            pre=None,
            suffix=None,
            build_number=None,
            current_version=None,
            no_increment=None,
            working_directory=None,
            config=None,
            execute=None,
            json=False,
            log_level=None,
        )
        values.update(overrides)
        return SimpleNamespace(**values)
    return _make
