"""
PubMed EFetch XML → PubmedArticle records.

PubMed XML is irregular: any element may be missing, appear once, or repeat,
and abstracts may or may not be split into labelled sections. Every field
is read through ``node_text`` so that all of those shapes collapse to a
plain string.

Extraction is isolated per article. If one <PubmedArticle> cannot be read,
it is replaced by a stub record and the batch continues, so callers always
get exactly one record per article node, in source order.
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable

from literature_scout.exceptions import ExtractionError
from literature_scout.models.model_article import PubmedArticle

logger = logging.getLogger(__name__)

XmlValue = ET.Element | str | Iterable["XmlValue"] | None

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Substrings of an AbstractText Label/NlmCategory → section field
_SECTION_KEYWORDS: list[tuple[str, str]] = [
    ("method", "methods"),
    ("materials", "methods"),
    ("result", "results"),
    ("discussion", "discussion"),
    ("conclusion", "conclusion"),
]


def node_text(value: XmlValue) -> str:
    """Normalize an absent, scalar, element or list value to stripped text.

    - None → ""
    - str → the string
    - Element → all text content, including nested markup such as <i>
    - list/iterable → text of the first item that has any
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, ET.Element):
        return " ".join("".join(value.itertext()).split())
    for item in value:
        text = node_text(item)
        if text:
            return text
    return ""


def field(parent: ET.Element | None, path: str) -> str:
    """Text at ``path`` under ``parent``, or "" if either is missing."""
    if parent is None:
        return ""
    return node_text(parent.findall(path))


def _normalize_date_part(value: str) -> str:
    if value.isdigit():
        return str(int(value))
    return str(_MONTHS.get(value[:3].lower(), value))


def extract_pub_date(article: ET.Element | None) -> str:
    """``YYYY``, ``YYYY-M`` or ``YYYY-M-D``; else MedlineDate; else ""."""
    pub_date = article.find("Journal/JournalIssue/PubDate") if article is not None else None
    if pub_date is None:
        return ""

    year = field(pub_date, "Year")
    if year:
        parts = [year]
        month = field(pub_date, "Month")
        if month:
            parts.append(_normalize_date_part(month))
            day = field(pub_date, "Day")
            if day:
                parts.append(_normalize_date_part(day))
        return "-".join(parts)

    return field(pub_date, "MedlineDate")


def extract_authors(article: ET.Element | None) -> list[str]:
    if article is None:
        return []

    authors = []
    for author in article.findall("AuthorList/Author"):
        last_name = field(author, "LastName")
        initials = field(author, "Initials")
        if last_name and initials:
            authors.append(f"{last_name} {initials}")
        elif last_name:
            authors.append(last_name)
        else:
            collective = field(author, "CollectiveName")
            if collective:
                authors.append(collective)
    return authors


def _section_for(label: str) -> str | None:
    lower = label.lower()
    for keyword, section in _SECTION_KEYWORDS:
        if keyword in lower:
            return section
    return None


def extract_abstract(article: ET.Element | None) -> dict[str, str | None]:
    """Whole abstract plus any methods/results/discussion/conclusion sections."""
    result: dict[str, str | None] = {
        "abstract": "",
        "methods": None,
        "results": None,
        "discussion": None,
        "conclusion": None,
    }
    if article is None:
        return result

    sections = article.findall("Abstract/AbstractText")
    texts = []
    for section in sections:
        text = node_text(section)
        if not text:
            continue
        texts.append(text)

        label = section.get("Label") or section.get("NlmCategory") or ""
        name = _section_for(label) if label else None
        if name:
            existing = result[name]
            result[name] = f"{existing} {text}" if existing else text

    result["abstract"] = " ".join(texts)
    return result


def extract_mesh_terms(citation: ET.Element) -> list[str]:
    terms = []
    for heading in citation.findall("MeshHeadingList/MeshHeading"):
        descriptor = field(heading, "DescriptorName")
        if descriptor:
            terms.append(descriptor)
        for qualifier in heading.findall("QualifierName"):
            name = node_text(qualifier)
            if name:
                terms.append(name)
    return terms


def extract_pmid(node: ET.Element) -> str:
    """PMID from the citation, falling back to the PubmedData id list."""
    pmid = field(node, "MedlineCitation/PMID")
    if pmid:
        return pmid
    for article_id in node.findall("PubmedData/ArticleIdList/ArticleId"):
        if article_id.get("IdType") == "pubmed":
            return node_text(article_id)
    return ""


def extract_article(node: ET.Element) -> PubmedArticle:
    """Extract one <PubmedArticle>. Raises if the node is unusable."""
    citation = node.find("MedlineCitation")
    if citation is None:
        raise ExtractionError("PubmedArticle has no MedlineCitation")

    pmid = extract_pmid(node)
    article = citation.find("Article")

    return PubmedArticle(
        pmid=pmid,
        title=field(article, "ArticleTitle"),
        authors=extract_authors(article),
        journal=field(article, "Journal/Title"),
        pub_date=extract_pub_date(article),
        mesh_terms=extract_mesh_terms(citation),
        **extract_abstract(article),
    )


class ArticleExtractor:
    """Parses EFetch payloads and extracts one record per article node."""

    @staticmethod
    def parse(raw_xml: str) -> ET.Element:
        """Parse a raw EFetch payload, raising ExtractionError if it is not XML."""
        try:
            return ET.fromstring(raw_xml)
        except ET.ParseError as e:
            raise ExtractionError(f"Failed to parse PubMed XML: {e}") from e

    def extract(self, root: ET.Element) -> list[PubmedArticle]:
        """Return exactly one record per <PubmedArticle> under ``root``."""
        nodes = root.findall(".//PubmedArticle")
        if root.tag == "PubmedArticle":
            nodes = [root]

        articles = []
        for index, node in enumerate(nodes):
            try:
                articles.append(extract_article(node))
            except Exception as e:
                pmid = self._safe_pmid(node)
                logger.warning(
                    "Failed to extract article #%d (PMID %s), using stub: %s",
                    index + 1,
                    pmid or "unknown",
                    e,
                )
                articles.append(PubmedArticle.stub(pmid))

        logger.debug(
            "Extracted %d articles (%d stubs)",
            len(articles),
            sum(a.is_stub for a in articles),
        )
        return articles

    def extract_from_xml(self, raw_xml: str) -> list[PubmedArticle]:
        return self.extract(self.parse(raw_xml))

    @staticmethod
    def _safe_pmid(node: ET.Element) -> str:
        try:
            return extract_pmid(node)
        except Exception:
            return ""
