from __future__ import annotations

import logging

import pytest

from polygen.spec import Specification
from tests._fixtures.spec_builder import SpecBuilder, todo_spec, user_spec


@pytest.fixture
def spec_builder() -> SpecBuilder:
    """Provide an empty specification builder."""
    return SpecBuilder()


@pytest.fixture
def user_specification() -> Specification:
    return user_spec().build()


@pytest.fixture
def todo_specification() -> Specification:
    return todo_spec().build()


@pytest.fixture(autouse=True)
def _reset_polygen_logger():
    """Drop handlers the CLI binds to a captured stream once the test ends."""
    yield
    logger = logging.getLogger("polygen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
