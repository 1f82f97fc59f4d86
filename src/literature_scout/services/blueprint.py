"""Turn raw article requests into normalized clinical blueprints."""

import logging

from literature_scout.config import Settings, get_settings
from literature_scout.constants import (
    SPECIALTY_ALIASES,
    SPECIALTY_COMMON_TOPICS,
    SPECIALTY_DEFAULT_CATEGORIES,
    SPECIALTY_MESH_TERMS,
)
from literature_scout.exceptions import BlueprintError
from literature_scout.models.model_blueprint import (
    ArticleRequest,
    ClinicalBlueprint,
    QueryFilters,
)

logger = logging.getLogger(__name__)


def normalize_specialty(specialty: str) -> str:
    """Lower-case, trim and resolve common aliases ("cardio" → "cardiology")."""
    normalized = specialty.lower().strip()
    return SPECIALTY_ALIASES.get(normalized, normalized)


def get_specialties() -> list[str]:
    return sorted(SPECIALTY_DEFAULT_CATEGORIES)


def get_suggested_topics(specialty: str) -> list[str]:
    """Common topics for ``specialty``; empty for an unknown specialty."""
    return list(SPECIALTY_COMMON_TOPICS.get(normalize_specialty(specialty), []))


def get_specialty_mesh_terms(specialty: str) -> list[str]:
    return list(SPECIALTY_MESH_TERMS.get(normalize_specialty(specialty), []))


def process_blueprint(
    request: ArticleRequest, settings: Settings | None = None
) -> ClinicalBlueprint:
    """Normalize ``request`` and fill in per-specialty defaults.

    Raises BlueprintError for a specialty we have no configuration for.
    An empty specialty is allowed as long as topics are given; the query
    builder enforces that at least one term remains.
    """
    settings = settings or get_settings()
    specialty = normalize_specialty(request.specialty)

    if specialty and specialty not in SPECIALTY_DEFAULT_CATEGORIES:
        raise BlueprintError(f"Invalid specialty: {specialty}")

    requested = request.filters or QueryFilters()
    categories = requested.clinical_query_categories or SPECIALTY_DEFAULT_CATEGORIES.get(
        specialty, []
    )

    blueprint = ClinicalBlueprint(
        specialty=specialty,
        topics=request.topics,
        filters=QueryFilters(
            clinical_query_categories=list(categories),
            age_group=requested.age_group,
            year_range=requested.year_range or settings.default_year_range,
        ),
    )
    logger.debug(
        "Processed blueprint specialty=%s topics=%d categories=%s",
        blueprint.specialty,
        len(blueprint.topics),
        blueprint.filters.clinical_query_categories,
    )
    return blueprint
