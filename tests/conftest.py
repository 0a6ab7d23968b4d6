"""Pytest configuration and shared fixtures for loop statement parser tests."""

import pytest
from sv_loop_parser import getLoopStatementParser


@pytest.fixture
def parser():
    """Create a parser instance that requires a single whole loop statement."""
    return getLoopStatementParser()


@pytest.fixture
def prefix_parser():
    """Create a parser instance that stops after the loop statement."""
    return getLoopStatementParser(require_eof=False)


def parse_success(parser, code):
    """Helper function to parse code and assert success."""
    result = parser.parse(code)
    assert result is not None
    return result


def parse_failure(parser, code):
    """Helper function to parse code and assert failure."""
    with pytest.raises(Exception):
        parser.parse(code)
