"""Post-fetch filters: drop articles without abstracts, keep specialty matches."""

import logging

from literature_scout.models.model_article import PubmedArticle
from literature_scout.services.blueprint import get_specialty_mesh_terms

logger = logging.getLogger(__name__)


def has_abstract(article: PubmedArticle) -> bool:
    return not article.is_stub and bool(article.abstract.strip())


def filter_with_abstracts(articles: list[PubmedArticle]) -> list[PubmedArticle]:
    """Keep articles that have abstract text. Stub records never do."""
    kept = [a for a in articles if has_abstract(a)]
    if len(kept) < len(articles):
        logger.debug(
            "Dropped %d of %d articles without an abstract",
            len(articles) - len(kept),
            len(articles),
        )
    return kept


def matches_specialty(article: PubmedArticle, mesh_terms: list[str]) -> bool:
    """True if any of the article's MeSH terms contains one of ``mesh_terms``."""
    wanted = [m.lower() for m in mesh_terms]
    return any(
        specialty_term in term.lower()
        for term in article.mesh_terms
        for specialty_term in wanted
    )


def filter_by_specialty(
    articles: list[PubmedArticle], specialty: str
) -> list[PubmedArticle]:
    """Keep articles indexed under the specialty's MeSH headings.

    A specialty with no MeSH table leaves the list unchanged.
    """
    mesh_terms = get_specialty_mesh_terms(specialty)
    if not mesh_terms:
        logger.warning("No MeSH terms for specialty %r, skipping specialty filter", specialty)
        return articles

    kept = [a for a in articles if matches_specialty(a, mesh_terms)]
    logger.debug(
        "Specialty filter %s kept %d of %d articles", specialty, len(kept), len(articles)
    )
    return kept
