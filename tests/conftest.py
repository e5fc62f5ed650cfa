import pytest
import structlog

from halfpipe.pipeline import ExecutionContext, Pipeline


@pytest.fixture
def background():
    """Empty, never-cancelled context."""
    return ExecutionContext.background()


@pytest.fixture
def pipeline():
    """Empty pipeline."""
    return Pipeline("test")


@pytest.fixture
def calls():
    """Side channel recording which steps ran."""
    return []


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep logging configuration from leaking between tests."""
    yield
    structlog.reset_defaults()
