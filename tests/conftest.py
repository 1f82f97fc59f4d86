"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from literature_scout.config import Settings
from literature_scout.models.model_blueprint import ClinicalBlueprint, QueryFilters
from literature_scout.utils.rate_limiter import RateLimiter


@pytest.fixture
def settings() -> Settings:
    """Settings pinned to defaults, independent of the environment."""
    return Settings(
        _env_file=None,
        ncbi_api_key="",
        contact_email="test@example.com",
        tool_name="literature-scout-tests",
        max_retries=3,
        retry_base_delay=0.0,
        default_page_size=10,
        default_year_range=2,
        max_query_length=800,
        max_search_terms=2,
        category_scope="narrow",
        strict_field_tags=True,
    )


@pytest.fixture
def rate_limiter() -> RateLimiter:
    """A limiter large enough never to block a unit test."""
    return RateLimiter(1000, 1.0, max_wait=None)


@pytest.fixture
def cardiology_blueprint() -> ClinicalBlueprint:
    return ClinicalBlueprint(
        specialty="cardiology",
        topics=["heart failure"],
        filters=QueryFilters(clinical_query_categories=["Therapy"], year_range=2),
    )


@pytest.fixture
def make_response():
    """Factory for stand-ins of aiohttp.ClientResponse."""

    def _make(status=200, json_data=None, text="", headers=None):
        resp = MagicMock()
        resp.status = status
        resp.headers = headers or {}
        resp.json = AsyncMock(return_value=json_data)
        resp.text = AsyncMock(return_value=text)
        return resp

    return _make


@pytest.fixture
def make_session():
    """Factory for a session whose get() returns the given responses in order."""

    def _make(*responses):
        session = MagicMock()
        session.closed = False
        session.get = AsyncMock(side_effect=list(responses))
        return session

    return _make
