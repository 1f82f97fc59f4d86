"""
Pydantic models for extracted PubMed articles.

These are the data contracts between the retrieval service and its callers.
Callers receive these models - they never see raw XML.
"""

from pydantic import BaseModel, model_validator

from literature_scout.constants import PUBMED_ARTICLE_URL, UNTITLED_ARTICLE


def article_url(pmid: str) -> str:
    return PUBMED_ARTICLE_URL.format(pmid=pmid) if pmid else ""


class PubmedArticle(BaseModel):
    """A single normalized PubMed article."""

    pmid: str = ""
    title: str = ""
    authors: list[str] = []  # "Lastname Initials" or collective name
    journal: str = ""
    pub_date: str = ""  # "YYYY", "YYYY-M", "YYYY-M-D" or free-form MedlineDate
    abstract: str = ""  # all sections, space-joined
    methods: str | None = None
    results: str | None = None
    discussion: str | None = None
    conclusion: str | None = None
    mesh_terms: list[str] = []  # descriptors and qualifiers, flat
    url: str = ""

    # Set by later stages, never by extraction
    full_text: str | None = None
    journal_score: float | None = None

    is_stub: bool = False

    @model_validator(mode="after")
    def fill_url(self) -> "PubmedArticle":
        if not self.url and self.pmid:
            self.url = article_url(self.pmid)
        return self

    @classmethod
    def stub(cls, pmid: str = "") -> "PubmedArticle":
        """Placeholder for an article whose XML could not be extracted."""
        return cls(pmid=pmid, title=UNTITLED_ARTICLE, is_stub=True)


class RetrievalResult(BaseModel):
    """Articles for one page of a blueprint search, plus the total hit count."""

    articles: list[PubmedArticle] = []
    total_count: int = 0
    query: str = ""
    elapsed_seconds: float = 0.0
