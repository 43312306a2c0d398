"""
Project-wide pytest fixtures.

Use these across test modules. Helpers live in tests.common.
"""
from __future__ import annotations

import pytest

# Ensure project root on path before any local imports
from tests.common import ensure_project_root

ensure_project_root()

from solders.keypair import Keypair  # noqa: E402
from solders.pubkey import Pubkey  # noqa: E402


@pytest.fixture
def executor_keypair() -> Keypair:
    """Fresh executor identity per test."""
    return Keypair()


@pytest.fixture
def executor_pubkey(executor_keypair: Keypair) -> Pubkey:
    return executor_keypair.pubkey()


@pytest.fixture
def authority() -> Pubkey:
    """A delegator address."""
    return Pubkey.new_unique()
