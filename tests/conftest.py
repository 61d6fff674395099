"""Shared fixtures."""

import pytest

from starregistry.blockchain.ledger import Ledger
from starregistry.registry.star_registry import StarRegistry

from .fakes import FakeClock, FakeVerifier


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    return Ledger(clock=clock)


@pytest.fixture
def verifier():
    return FakeVerifier(result=True)


@pytest.fixture
def registry(ledger, verifier, clock):
    return StarRegistry(ledger=ledger, verifier=verifier, clock=clock)
