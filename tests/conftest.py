"""Shared test fixtures for the notiondocs test suite."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from fakes import FakeNotion, make_config, make_context

from notiondocs.config import ExportConfig
from notiondocs.context import ExportContext
from notiondocs.observability.logger import ROOT_LOGGER


@pytest.fixture
def config() -> ExportConfig:
    """Default test configuration with a dummy token and no delays."""
    return make_config()


@pytest.fixture
def notion() -> FakeNotion:
    """An empty in-memory Notion workspace."""
    return FakeNotion()


@pytest.fixture
def ctx(notion: FakeNotion, config: ExportConfig) -> Iterator[ExportContext]:
    """Export context wired to the ``notion`` fake."""
    context = make_context(notion, config)
    yield context
    context.close()


@pytest.fixture(autouse=True)
def _propagate_notiondocs_logs():
    """Keep caplog working even after a test configured JSON logging."""
    logger = logging.getLogger(ROOT_LOGGER)
    propagate = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = propagate
