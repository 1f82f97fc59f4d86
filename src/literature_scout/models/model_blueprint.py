"""
Pydantic models for clinical search requests.

ArticleRequest is what callers send; ClinicalBlueprint is the normalized form
the query builder consumes.
"""

from pydantic import BaseModel, Field, field_validator


class QueryFilters(BaseModel):
    """Filters applied on top of the specialty/topic terms."""

    clinical_query_categories: list[str] = []
    age_group: str | None = None
    year_range: int | None = Field(default=None, gt=0)


class ClinicalBlueprint(BaseModel):
    """Normalized clinical search intent."""

    specialty: str = ""
    topics: list[str] = []
    filters: QueryFilters = QueryFilters()

    @field_validator("topics")
    @classmethod
    def normalize_topics(cls, topics: list[str]) -> list[str]:
        # Lower-case, strip, drop empties, dedup preserving first occurrence
        normalized = [t.lower().strip() for t in topics]
        return list(dict.fromkeys(t for t in normalized if t))

    @property
    def specialty_name(self) -> str:
        """Specialty as search text: "internal_medicine" -> "internal medicine"."""
        return " ".join(self.specialty.replace("_", " ").split())

    @property
    def search_terms(self) -> list[str]:
        """Specialty name followed by topics, empties removed."""
        return [t for t in [self.specialty_name, *self.topics] if t]


class ArticleRequest(BaseModel):
    """Raw request as received from the CLI or HTTP adapter."""

    specialty: str
    topics: list[str] = []
    filters: QueryFilters | None = None
    page: int = Field(default=1, ge=1)
    limit: int | None = Field(default=None, ge=1)
    # Keep only articles whose MeSH terms match the specialty
    mesh_filter: bool = False
