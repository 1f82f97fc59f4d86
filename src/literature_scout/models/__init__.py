"""Data models for literature_scout."""

from literature_scout.models.model_article import PubmedArticle, RetrievalResult
from literature_scout.models.model_blueprint import (
    ArticleRequest,
    ClinicalBlueprint,
    QueryFilters,
)

__all__ = [
    "ArticleRequest",
    "ClinicalBlueprint",
    "PubmedArticle",
    "QueryFilters",
    "RetrievalResult",
]
