"""Shared fixtures for Atlassian DC MCP tests."""

import pytest

from atlassian_dc_mcp.logging_config import DEFAULT_LOGGER_NAME, setup_logger
from atlassian_dc_mcp.pruning import PruneConfig, init_prune_config


@pytest.fixture(autouse=True)
def app_logger():
    """Give every test a fresh application logger whose records reach caplog."""
    logger = setup_logger(DEFAULT_LOGGER_NAME, level="DEBUG")
    logger.propagate = True
    yield logger
    logger.clear_context()


@pytest.fixture(autouse=True)
def reset_prune_config():
    """Restore the process-wide prune configuration after each test."""
    yield
    init_prune_config(PruneConfig.default())
