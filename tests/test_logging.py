"""Tests for logging utilities."""

import logging
from io import StringIO

import numpy as np
import pytest

from generalqp.ldl import NullspaceHessianLDL
from generalqp.logging import (
    configure_logging,
    get_logger,
    set_log_level,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    configure_logging(level=logging.WARNING)


def test_get_logger_returns_logger():
    """Test that get_logger returns a logger instance."""
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "generalqp.test_module"


def test_get_logger_keeps_package_names():
    assert get_logger("generalqp.qp").name == "generalqp.qp"
    assert get_logger().name == "generalqp"


def test_get_logger_caching():
    """Test that get_logger caches loggers."""
    logger1 = get_logger("test_module")
    logger2 = get_logger("test_module")
    assert logger1 is logger2


def test_get_logger_different_modules():
    """Test that different modules get different loggers."""
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")
    assert logger1 is not logger2
    assert logger1.name != logger2.name


def test_set_log_level_string():
    """Test that set_log_level accepts string levels."""
    logger = get_logger("test_module")

    set_log_level("DEBUG")
    assert logger.level == logging.DEBUG

    set_log_level("ERROR")
    assert logger.level == logging.ERROR


def test_set_log_level_applies_to_new_loggers():
    set_log_level(logging.INFO)
    assert get_logger("created_after_level_change").level == logging.INFO


def test_configure_logging():
    """Test configure_logging function."""
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)

    logger = get_logger("test_module")
    logger.debug("Debug message")

    output = stream.getvalue()
    assert "[DEBUG] generalqp.test_module: Debug message" in output


def test_logger_does_not_propagate():
    """Test that loggers don't propagate to root logger."""
    logger = get_logger("test_module")
    assert logger.propagate is False


def test_ignored_index_is_warned():
    stream = StringIO()
    configure_logging(level=logging.WARNING, stream=stream)
    F = NullspaceHessianLDL(np.diag([1.0, -1.0]), np.zeros((2, 0)))
    F.remove_constraint(3)
    assert "Ignoring index 3" in stream.getvalue()


def test_factorization_events_at_debug():
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)
    NullspaceHessianLDL(-np.eye(3), np.zeros((3, 0)))
    assert "3 artificial constraints" in stream.getvalue()


def test_solve_warns_about_unbounded_problems():
    from generalqp.qp import solve

    stream = StringIO()
    configure_logging(level=logging.WARNING, stream=stream)
    x = solve(np.diag([1.0, 0.0]), np.array([0.0, -1.0]), np.array([[-1.0, 0.0]]), np.array([1.0]), np.zeros(2))
    assert np.array_equal(x, np.zeros(2))
    assert "[WARNING] generalqp.qp: Problem is unbounded" in stream.getvalue()
