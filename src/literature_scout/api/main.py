"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from literature_scout import __version__
from literature_scout.config import get_settings
from literature_scout.exceptions import (
    BlueprintError,
    ExtractionError,
    QueryConstructionError,
    RateLimitTimeoutError,
    RetrievalError,
)
from literature_scout.models.model_article import RetrievalResult
from literature_scout.models.model_blueprint import ArticleRequest
from literature_scout.services.blueprint import (
    get_specialties,
    get_specialty_mesh_terms,
    get_suggested_topics,
    normalize_specialty,
)
from literature_scout.services.journal_ranking import rank_articles
from literature_scout.services.retrieval import PubmedRetrievalService
from literature_scout.utils.rate_limiter import RateLimiter, RateLimiterStatus

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    # One limiter for every request this process serves
    app.state.rate_limiter = RateLimiter.from_settings(settings)
    app.state.service = PubmedRetrievalService(
        rate_limiter=app.state.rate_limiter, settings=settings
    )
    yield
    await app.state.service.close()


app = FastAPI(
    title="Literature Scout API",
    description="Rate-limited PubMed retrieval for clinical specialties and topics",
    version=__version__,
    lifespan=lifespan,
)


def get_service(request: Request) -> PubmedRetrievalService:
    return request.app.state.service


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(QueryConstructionError)
@app.exception_handler(BlueprintError)
async def bad_request_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RetrievalError)
async def retrieval_error_handler(request: Request, exc: RetrievalError) -> JSONResponse:
    logger.error("Retrieval failed: %s", exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
    logger.error("Extraction failed: %s", exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(RateLimitTimeoutError)
async def rate_limit_handler(request: Request, exc: RateLimitTimeoutError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/specialties")
async def list_specialties() -> dict[str, list[str]]:
    return {"specialties": get_specialties()}


@app.get("/specialties/{specialty}/topics")
async def specialty_topics(specialty: str) -> dict[str, str | list[str]]:
    """Suggested topics and MeSH terms for one specialty."""
    key = normalize_specialty(specialty)
    topics = get_suggested_topics(key)
    if not topics:
        raise BlueprintError(f"Invalid specialty: {key}")
    return {
        "specialty": key,
        "topics": topics,
        "mesh_terms": get_specialty_mesh_terms(key),
    }


@app.get("/rate-limit")
async def rate_limit_status(
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> RateLimiterStatus:
    return limiter.status()


@app.post("/articles")
async def get_articles(
    article_request: ArticleRequest,
    rank: bool = True,
    service: PubmedRetrievalService = Depends(get_service),
) -> RetrievalResult:
    """Retrieve one page of articles for a clinical request."""
    result = await service.retrieve_for_request(article_request)
    if rank:
        result.articles = rank_articles(result.articles)
    return result
