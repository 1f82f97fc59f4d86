"""Journal quality scoring against a static list of clinically useful journals."""

import logging
import re

from literature_scout.constants import (
    CLINICALLY_USEFUL_JOURNALS,
    STANDARD_JOURNAL_SCORE,
    USEFUL_JOURNAL_SCORE,
)
from literature_scout.models.model_article import PubmedArticle

logger = logging.getLogger(__name__)


def normalize_journal_name(name: str) -> str:
    """Loose key for matching "The Journal of X" against "J X" style names."""
    normalized = " ".join(name.lower().split())
    normalized = re.sub(r"^the\s+", "", normalized)
    normalized = re.sub(r"journal\s+of\s+", "j ", normalized)
    normalized = normalized.replace("&", "and")
    normalized = re.sub(r"[^\w\s]", "", normalized)
    return normalized.strip()


_USEFUL_JOURNALS = frozenset(normalize_journal_name(j) for j in CLINICALLY_USEFUL_JOURNALS)


def is_useful_journal(journal: str) -> bool:
    return bool(journal) and normalize_journal_name(journal) in _USEFUL_JOURNALS


def journal_score(journal: str) -> float:
    return USEFUL_JOURNAL_SCORE if is_useful_journal(journal) else STANDARD_JOURNAL_SCORE


def rank_articles(articles: list[PubmedArticle]) -> list[PubmedArticle]:
    """Attach journal scores and sort best-first; ties keep their order."""
    scored = [
        article.model_copy(update={"journal_score": journal_score(article.journal)})
        for article in articles
    ]
    scored.sort(key=lambda a: a.journal_score, reverse=True)
    logger.debug(
        "Ranked %d articles, %d from clinically useful journals",
        len(scored),
        sum(a.journal_score == USEFUL_JOURNAL_SCORE for a in scored),
    )
    return scored
