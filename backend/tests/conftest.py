from __future__ import annotations

import pytest

from contentguard.moderation.domain.container import configure
from contentguard.moderation.domain.fetcher import InMemoryContentFetcher
from contentguard.obs import logging as obs_logging


@pytest.fixture(autouse=True)
def reset_container():
    try:
        yield
    finally:
        configure(None)
        obs_logging.clear_context()


@pytest.fixture
def fetcher() -> InMemoryContentFetcher:
    return InMemoryContentFetcher()
