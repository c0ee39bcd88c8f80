"""
Tests for journeykit console logging
"""

import io

import pytest
from loguru import logger

from journeykit.core.logger import setup_logger


@pytest.fixture
def stream():
    buffer = io.StringIO()
    yield buffer
    logger.remove()


class TestSetupLogger:
    """Verbosity decides level and format"""

    def test_quiet_drops_debug_and_info(self, stream):
        setup_logger(sink=stream)
        logger.debug("step 0 invalid")
        logger.info("journey started")
        logger.warning("ignoring change")
        assert stream.getvalue() == "WARNING: ignoring change\n"

    def test_verbose_includes_debug_with_source(self, stream):
        setup_logger(verbose=True, sink=stream)
        logger.debug("Navigating: Step 0 → 1")
        output = stream.getvalue()
        assert "DEBUG" in output
        assert "Navigating: Step 0 → 1" in output
        assert "test_logger" in output
