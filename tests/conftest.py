"""
Pytest Configuration and Fixtures.

Provides the three-asset textbook example shared by all tests.
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from portfolio_geometry.config import BulletExample
from portfolio_geometry.core.geometry import covariance_for


@pytest.fixture(scope="session")
def example():
    return BulletExample()


@pytest.fixture(scope="session")
def assets(example):
    return example.assets()


@pytest.fixture(scope="session")
def correlation(example):
    return example.correlation()


@pytest.fixture(scope="session")
def cov(assets, correlation):
    return covariance_for(assets, correlation)


@pytest.fixture(scope="session")
def coefficients(example):
    return example.coefficients()


@pytest.fixture
def rng():
    return np.random.default_rng(42)
