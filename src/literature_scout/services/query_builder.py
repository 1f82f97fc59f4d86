"""
PubMed query construction and validation.

A blueprint becomes a query of up to five parenthesized clauses joined with
AND:

    (terms) AND (categories) AND (recency) AND (journals) [AND (age)]

Terms are left untagged so PubMed's Automatic Term Mapping expands them.
If the assembled query fails validation, a minimal query that is always
valid is returned instead, so retrieval can still proceed.
"""

import logging
import re

from literature_scout.config import Settings, get_settings
from literature_scout.constants import (
    AGE_MAP,
    CORE_CLINICAL_JOURNALS,
    DEFAULT_FILTER,
    FILTER_MAP,
    MAX_RETMAX,
    MIN_QUERY_LENGTH,
    MIN_RETMAX,
    SPECIALTY_JOURNALS,
    VALID_FIELD_TAGS,
)
from literature_scout.exceptions import EmptyTermsError, QueryValidationError
from literature_scout.models.model_blueprint import ClinicalBlueprint

logger = logging.getLogger(__name__)

_FIELD_TAG_RE = re.compile(r"\[([^\]]*)\]")
_OPERATOR_RE = re.compile(r"\b(AND|OR)\b")
_DANGLING_OPERATOR_RE = re.compile(r"\b(AND|OR)\s*$")
_UNSAFE_TERM_CHARS_RE = re.compile(r"[()\[\]\"]")


def build_term_clause(blueprint: ClinicalBlueprint, max_terms: int) -> str:
    """OR-join the specialty and topics, capped at ``max_terms``."""
    terms = blueprint.search_terms
    if not terms:
        raise EmptyTermsError(
            "At least one search term (specialty or topic) is required"
        )

    if max_terms > 0 and len(terms) > max_terms:
        logger.debug(
            "Limited search terms to first %d, dropped: %s",
            max_terms,
            terms[max_terms:],
        )
        terms = terms[:max_terms]

    return " OR ".join(terms)


def build_category_clause(categories: list[str], scope: str = "narrow") -> str:
    """Clinical Queries filter for the requested categories.

    Unknown category names are skipped. With no known category the default
    publication-type filter is used on its own.
    """
    selected = [FILTER_MAP[c][scope] for c in categories if c in FILTER_MAP]

    skipped = [c for c in categories if c not in FILTER_MAP]
    if skipped:
        logger.debug("Ignoring unknown clinical categories: %s", skipped)

    if not selected:
        return DEFAULT_FILTER

    category_expr = " OR ".join(selected)
    return f"({category_expr}) AND ({DEFAULT_FILTER})"


def build_recency_clause(year_range: int) -> str:
    return f'"last {year_range} years"[PDat]'


def build_journal_clause(specialty: str) -> str:
    key = specialty.lower().strip().replace(" ", "_")
    journals = SPECIALTY_JOURNALS.get(key, CORE_CLINICAL_JOURNALS)
    return " OR ".join(f'"{journal}"' for journal in journals)


def build_age_clause(age_group: str | None) -> str | None:
    if not age_group:
        return None
    clause = AGE_MAP.get(age_group)
    if clause is None:
        logger.debug("Unknown age group %r, omitting age filter", age_group)
    return clause


def fallback_query(blueprint: ClinicalBlueprint, year_range: int) -> str:
    """Minimal query used when the full query does not validate."""
    terms = blueprint.search_terms
    term = _UNSAFE_TERM_CHARS_RE.sub(" ", terms[0]).strip() if terms else ""
    term = " ".join(term.split()) or "medicine"
    return f"{term} AND {build_recency_clause(year_range)} AND English[Language]"


def build_search_query(
    blueprint: ClinicalBlueprint,
    settings: Settings | None = None,
    *,
    use_fallback: bool = True,
) -> str:
    """Build a complete PubMed query for ``blueprint``.

    Raises EmptyTermsError when there is nothing to search for. An invalid
    query is replaced by ``fallback_query`` unless ``use_fallback`` is False,
    in which case QueryValidationError is raised.
    """
    settings = settings or get_settings()
    filters = blueprint.filters
    year_range = filters.year_range or settings.default_year_range

    clauses = [
        build_term_clause(blueprint, settings.max_search_terms),
        build_category_clause(
            filters.clinical_query_categories, settings.category_scope
        ),
        build_recency_clause(year_range),
        build_journal_clause(blueprint.specialty),
    ]
    age_clause = build_age_clause(filters.age_group)
    if age_clause:
        clauses.append(age_clause)

    query = " AND ".join(f"({clause})" for clause in clauses)
    logger.debug("Built search query: %s", query)

    reason = query_problem(query, settings)
    if reason is None:
        return query

    if not use_fallback:
        raise QueryValidationError(query, reason)

    fallback = fallback_query(blueprint, year_range)
    logger.warning(
        "Query validation failed (%s), using fallback query: %s", reason, fallback
    )
    return fallback


def query_problem(
    query: str, settings: Settings | None = None, strict: bool | None = None
) -> str | None:
    """Return why ``query`` is invalid, or None if it is valid."""
    settings = settings or get_settings()
    strict = settings.strict_field_tags if strict is None else strict

    if len(query) < MIN_QUERY_LENGTH:
        return "too short"
    if len(query) > settings.max_query_length:
        return f"too long ({len(query)} > {settings.max_query_length} characters)"

    depth = 0
    for char in query:
        if char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                return "unmatched closing parenthesis"
            depth -= 1
    if depth:
        return f"{depth} unclosed parentheses"

    if not _OPERATOR_RE.search(query):
        return "missing boolean operator"
    if _DANGLING_OPERATOR_RE.search(query):
        return "ends with an operator"

    if strict:
        for tag in _FIELD_TAG_RE.findall(query):
            if tag.strip().lower() not in VALID_FIELD_TAGS:
                return f"invalid field tag [{tag}]"

    return None


def validate_query(
    query: str, settings: Settings | None = None, strict: bool | None = None
) -> bool:
    """True if ``query`` is safe to send to ESearch."""
    reason = query_problem(query, settings, strict)
    if reason is not None:
        logger.debug("Query validation failed: %s", reason)
        return False
    return True


def build_pagination(page: int = 1, limit: int = 10) -> tuple[int, int]:
    """Return ``(retmax, retstart)`` for a 1-based page."""
    retmax = min(max(MIN_RETMAX, limit), MAX_RETMAX)
    retstart = (max(1, page) - 1) * retmax
    return retmax, retstart
