"""Unit tests for PubmedRetrievalService."""

from unittest.mock import AsyncMock, patch

import pytest

from literature_scout.data_sources.eutils import EUtilitiesClient
from literature_scout.exceptions import EmptyTermsError
from literature_scout.models.model_article import PubmedArticle, RetrievalResult
from literature_scout.models.model_blueprint import ArticleRequest, ClinicalBlueprint
from literature_scout.services.retrieval import PubmedRetrievalService

EFETCH_XML = """<?xml version="1.0"?>
<PubmedArticleSet>
    <PubmedArticle>
        <MedlineCitation>
            <PMID>1</PMID>
            <Article><ArticleTitle>First</ArticleTitle></Article>
        </MedlineCitation>
    </PubmedArticle>
    <PubmedArticle>
        <MedlineCitation>
            <PMID>2</PMID>
            <Article><ArticleTitle>Second</ArticleTitle></Article>
        </MedlineCitation>
    </PubmedArticle>
    <PubmedArticle>
        <MedlineCitation>
            <PMID>3</PMID>
            <Article><ArticleTitle>Third</ArticleTitle></Article>
        </MedlineCitation>
    </PubmedArticle>
</PubmedArticleSet>
"""


@pytest.fixture
def client(settings, rate_limiter):
    return EUtilitiesClient(rate_limiter=rate_limiter, settings=settings)


@pytest.fixture
def service(client, settings):
    return PubmedRetrievalService(client, settings=settings)


@pytest.mark.asyncio
class TestSearchArticles:
    """Tests for search_articles and get_article_count."""

    async def test_returns_idlist(self, service, client, make_response, make_session):
        session = make_session(
            make_response(json_data={"esearchresult": {"count": "50", "idlist": ["9", "8"]}})
        )

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            pmids = await service.search_articles("asthma AND copd", page=3, limit=20)

        assert pmids == ["9", "8"]
        params = session.get.call_args.kwargs["params"]
        assert params["retmax"] == 20
        assert params["retstart"] == 40

    async def test_default_page_size(self, service, client, make_response, make_session):
        session = make_session(make_response(json_data={"esearchresult": {"idlist": []}}))

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            await service.search_articles("asthma AND copd")

        assert session.get.call_args.kwargs["params"]["retmax"] == 10

    async def test_zero_limit_clamps_to_one(self, service, client, make_response, make_session):
        session = make_session(make_response(json_data={"esearchresult": {"idlist": ["9"]}}))

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            await service.search_articles("asthma AND copd", page=2, limit=0)

        params = session.get.call_args.kwargs["params"]
        assert params["retmax"] == 1
        assert params["retstart"] == 1

    async def test_missing_idlist_is_empty(self, service, client, make_response, make_session):
        session = make_session(make_response(json_data={"esearchresult": {"count": "0"}}))

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            assert await service.search_articles("asthma AND copd") == []

    async def test_count(self, service, client, make_response, make_session):
        session = make_session(make_response(json_data={"esearchresult": {"count": "1234"}}))

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            count = await service.get_article_count("asthma AND copd")

        assert count == 1234
        assert session.get.call_args.kwargs["params"]["retmax"] == 0

    async def test_missing_count_is_zero(self, service, client, make_response, make_session):
        session = make_session(make_response(json_data={}))

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            assert await service.get_article_count("asthma AND copd") == 0


@pytest.mark.asyncio
class TestFetchArticleDetails:
    """Tests for fetch_article_details."""

    async def test_single_batched_request(self, service, client, make_response, make_session):
        session = make_session(make_response(text=EFETCH_XML))

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            articles = await service.fetch_article_details(["1", "2", "3"])

        assert session.get.await_count == 1
        assert session.get.call_args.kwargs["params"]["id"] == "1,2,3"
        assert [a.pmid for a in articles] == ["1", "2", "3"]
        assert [a.title for a in articles] == ["First", "Second", "Third"]

    async def test_empty_input_makes_no_request(self, service, client):
        with patch.object(client, "_get_session", new=AsyncMock()) as get_session:
            assert await service.fetch_article_details([]) == []

        get_session.assert_not_called()


@pytest.mark.asyncio
class TestRetrieve:
    """Tests for the full retrieve pipeline."""

    async def test_retrieve(self, service, client, cardiology_blueprint, make_response, make_session):
        session = make_session(
            make_response(json_data={"esearchresult": {"count": "3"}}),
            make_response(json_data={"esearchresult": {"idlist": ["1", "2", "3"]}}),
            make_response(text=EFETCH_XML),
        )

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            result = await service.retrieve(cardiology_blueprint)

        assert result.total_count == 3
        assert len(result.articles) == 3
        assert result.query.startswith("(cardiology OR heart failure)")
        assert session.get.await_count == 3

    async def test_zero_count_skips_search_and_fetch(
        self, service, client, cardiology_blueprint, make_response, make_session
    ):
        session = make_session(make_response(json_data={"esearchresult": {"count": "0"}}))

        with patch.object(client, "_get_session", new=AsyncMock(return_value=session)):
            result = await service.retrieve(cardiology_blueprint)

        assert result.total_count == 0
        assert result.articles == []
        assert session.get.await_count == 1

    async def test_empty_blueprint_fails_before_network(self, service, client):
        with patch.object(client, "_get_session", new=AsyncMock()) as get_session:
            with pytest.raises(EmptyTermsError):
                await service.retrieve(ClinicalBlueprint())

        get_session.assert_not_called()

    async def test_retrieve_for_request(self, service):
        request = ArticleRequest(specialty="Cardio", topics=["Heart Failure"], page=2, limit=5)

        with patch.object(
            service, "retrieve", new_callable=AsyncMock, return_value=RetrievalResult()
        ) as mock_retrieve:
            await service.retrieve_for_request(request)

        blueprint, page, limit = mock_retrieve.call_args.args
        assert blueprint.specialty == "cardiology"
        assert blueprint.topics == ["heart failure"]
        assert (page, limit) == (2, 5)

    async def test_context_manager_closes_client(self, service, client):
        with patch.object(client, "close", new_callable=AsyncMock) as mock_close:
            async with service:
                pass

        mock_close.assert_awaited_once()


@pytest.mark.asyncio
class TestRetrieveForRequestFilters:
    """Tests for post-fetch filtering in retrieve_for_request."""

    FETCHED = RetrievalResult(
        articles=[
            PubmedArticle(pmid="1", abstract="Trial.", mesh_terms=["Heart Failure"]),
            PubmedArticle(pmid="2", abstract=""),
            PubmedArticle.stub("3"),
            PubmedArticle(pmid="4", abstract="Review.", mesh_terms=["Asthma"]),
            PubmedArticle(pmid="5", abstract="Cohort.", mesh_terms=["Heart Diseases"]),
        ],
        total_count=250,
        query="(cardiology) AND (x)",
    )

    async def test_drops_articles_without_abstract(self, service):
        request = ArticleRequest(specialty="cardiology")

        with patch.object(
            service, "retrieve", new_callable=AsyncMock, return_value=self.FETCHED
        ):
            result = await service.retrieve_for_request(request)

        assert [a.pmid for a in result.articles] == ["1", "4", "5"]
        assert result.total_count == 250

    async def test_mesh_filter(self, service):
        request = ArticleRequest(specialty="cardio", mesh_filter=True)

        with patch.object(
            service, "retrieve", new_callable=AsyncMock, return_value=self.FETCHED
        ):
            result = await service.retrieve_for_request(request)

        assert [a.pmid for a in result.articles] == ["1", "5"]
