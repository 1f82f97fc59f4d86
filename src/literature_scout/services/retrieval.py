"""
Retrieval service: blueprint → PubMed query → PMIDs → normalized articles.

All network calls go through EUtilitiesClient, which takes a slot from the
shared rate limiter before every outbound request and owns the retry policy.
This layer never retries.
"""

import logging
import time

from literature_scout.config import Settings, get_settings
from literature_scout.data_sources.eutils import EUtilitiesClient
from literature_scout.models.model_article import PubmedArticle, RetrievalResult
from literature_scout.models.model_blueprint import ArticleRequest, ClinicalBlueprint
from literature_scout.services.article_extractor import ArticleExtractor
from literature_scout.services.blueprint import process_blueprint
from literature_scout.services.query_builder import build_pagination, build_search_query
from literature_scout.services.specialty_filter import (
    filter_by_specialty,
    filter_with_abstracts,
)
from literature_scout.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class PubmedRetrievalService:
    """Search and fetch PubMed articles under the shared rate limit."""

    def __init__(
        self,
        client: EUtilitiesClient | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        extractor: ArticleExtractor | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or EUtilitiesClient(
            rate_limiter=rate_limiter, settings=self.settings
        )
        self.extractor = extractor or ArticleExtractor()

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def search_articles(
        self, query: str, page: int = 1, limit: int | None = None
    ) -> list[str]:
        """Return the PMIDs on ``page`` of the results for ``query``."""
        if limit is None:
            limit = self.settings.default_page_size
        retmax, retstart = build_pagination(page, limit)
        result = await self.client.esearch(query, retmax=retmax, retstart=retstart)
        logger.debug(
            "Search returned %d PMIDs (retstart=%d retmax=%d)",
            len(result.idlist),
            retstart,
            retmax,
        )
        return result.idlist

    async def get_article_count(self, query: str) -> int:
        """Total number of PubMed records matching ``query``."""
        result = await self.client.esearch(query, retmax=0)
        return result.count

    async def fetch_article_details(self, pmids: list[str]) -> list[PubmedArticle]:
        """Fetch and extract ``pmids`` in one EFetch call, preserving order."""
        if not pmids:
            logger.debug("No PMIDs provided, skipping fetch")
            return []

        logger.debug("Fetching details for %d articles", len(pmids))
        xml_text = await self.client.efetch(pmids)
        return self.extractor.extract_from_xml(xml_text)

    async def retrieve(
        self, blueprint: ClinicalBlueprint, page: int = 1, limit: int | None = None
    ) -> RetrievalResult:
        """Run the full pipeline for one page of ``blueprint`` results."""
        start = time.monotonic()
        query = build_search_query(blueprint, self.settings)

        total_count = await self.get_article_count(query)
        logger.info("Found %d total matching articles", total_count)

        pmids = await self.search_articles(query, page, limit) if total_count else []
        articles = await self.fetch_article_details(pmids)

        elapsed = time.monotonic() - start
        logger.info(
            "Retrieved %d articles for page %d in %.2fs", len(articles), page, elapsed
        )
        return RetrievalResult(
            articles=articles,
            total_count=total_count,
            query=query,
            elapsed_seconds=elapsed,
        )

    async def retrieve_for_request(self, request: ArticleRequest) -> RetrievalResult:
        """Normalize a raw request into a blueprint, ``retrieve``, then filter.

        Articles without an abstract (stubs included) are dropped. With
        ``request.mesh_filter`` set, only articles indexed under the
        specialty's MeSH headings are kept. ``total_count`` is still the
        PubMed hit count.
        """
        blueprint = process_blueprint(request, self.settings)
        result = await self.retrieve(blueprint, request.page, request.limit)

        articles = filter_with_abstracts(result.articles)
        if request.mesh_filter and blueprint.specialty:
            articles = filter_by_specialty(articles, blueprint.specialty)
        return result.model_copy(update={"articles": articles})
