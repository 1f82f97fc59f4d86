"""Unit tests for services/article_extractor."""

import xml.etree.ElementTree as ET
from unittest.mock import patch

import pytest

from literature_scout.exceptions import ExtractionError
from literature_scout.services.article_extractor import (
    ArticleExtractor,
    extract_abstract,
    extract_authors,
    extract_pub_date,
    node_text,
)


def _article(pmid: str, body: str = "", title: str = "A title") -> str:
    return f"""
    <PubmedArticle>
        <MedlineCitation>
            <PMID>{pmid}</PMID>
            <Article>
                <Journal>
                    <JournalIssue><PubDate><Year>2023</Year></PubDate></JournalIssue>
                    <Title>Circulation</Title>
                </Journal>
                <ArticleTitle>{title}</ArticleTitle>
                {body}
            </Article>
        </MedlineCitation>
    </PubmedArticle>
    """


def _article_set(*articles: str) -> str:
    return '<?xml version="1.0"?>\n<PubmedArticleSet>' + "".join(articles) + "</PubmedArticleSet>"


def _article_element(inner: str) -> ET.Element:
    return ET.fromstring(f"<Article>{inner}</Article>")


class TestNodeText:
    """Tests for node_text normalization."""

    def test_none(self):
        assert node_text(None) == ""

    def test_string(self):
        assert node_text("  Heart failure  ") == "Heart failure"

    def test_element_with_nested_markup(self):
        element = ET.fromstring(
            "<AbstractText>Use of <i>E. coli</i> strains\n   in <b>vitro</b></AbstractText>"
        )

        assert node_text(element) == "Use of E. coli strains in vitro"

    def test_list_takes_first_non_empty(self):
        first = ET.fromstring("<Title> </Title>")
        second = ET.fromstring("<Title>Lancet</Title>")

        assert node_text([first, second]) == "Lancet"

    def test_empty_list(self):
        assert node_text([]) == ""


class TestExtractPubDate:
    """Tests for extract_pub_date."""

    @pytest.mark.parametrize(
        "pub_date, expected",
        [
            ("<Year>2020</Year><Month>03</Month>", "2020-3"),
            ("<Year>2020</Year>", "2020"),
            ("<Year>2020</Year><Month>Mar</Month><Day>05</Day>", "2020-3-5"),
            ("<Year>2021</Year><Month>December</Month>", "2021-12"),
            ("<MedlineDate>2020 Spring</MedlineDate>", "2020 Spring"),
            ("", ""),
        ],
    )
    def test_formats(self, pub_date, expected):
        article = _article_element(
            f"<Journal><JournalIssue><PubDate>{pub_date}</PubDate></JournalIssue></Journal>"
        )

        assert extract_pub_date(article) == expected

    def test_missing_journal(self):
        assert extract_pub_date(_article_element("")) == ""


class TestExtractAuthors:
    """Tests for extract_authors."""

    def test_author_precedence(self):
        article = _article_element(
            """
            <AuthorList>
                <Author><LastName>Smith</LastName><Initials>JA</Initials></Author>
                <Author><LastName>Jones</LastName></Author>
                <Author><CollectiveName>HF Trial Group</CollectiveName></Author>
                <Author><ForeName>Nobody</ForeName></Author>
            </AuthorList>
            """
        )

        assert extract_authors(article) == ["Smith JA", "Jones", "HF Trial Group"]

    def test_no_author_list(self):
        assert extract_authors(_article_element("")) == []


class TestExtractAbstract:
    """Tests for extract_abstract."""

    def test_labelled_sections(self):
        article = _article_element(
            """
            <Abstract>
                <AbstractText Label="BACKGROUND">Why.</AbstractText>
                <AbstractText Label="MATERIALS AND METHODS">How.</AbstractText>
                <AbstractText Label="RESULTS">What.</AbstractText>
                <AbstractText Label="DISCUSSION">Hmm.</AbstractText>
                <AbstractText Label="CONCLUSIONS">So.</AbstractText>
            </Abstract>
            """
        )

        result = extract_abstract(article)

        assert result["abstract"] == "Why. How. What. Hmm. So."
        assert result["methods"] == "How."
        assert result["results"] == "What."
        assert result["discussion"] == "Hmm."
        assert result["conclusion"] == "So."

    def test_nlm_category_used_when_no_label(self):
        article = _article_element(
            '<Abstract><AbstractText NlmCategory="METHODS">Cohort.</AbstractText></Abstract>'
        )

        assert extract_abstract(article)["methods"] == "Cohort."

    def test_unlabelled_abstract(self):
        article = _article_element(
            "<Abstract><AbstractText>Plain abstract.</AbstractText></Abstract>"
        )

        result = extract_abstract(article)

        assert result["abstract"] == "Plain abstract."
        assert result["methods"] is None
        assert result["conclusion"] is None

    def test_no_abstract(self):
        assert extract_abstract(_article_element(""))["abstract"] == ""


class TestArticleExtractor:
    """Tests for ArticleExtractor batch extraction."""

    def test_full_article(self):
        body = """
            <AuthorList>
                <Author><LastName>Smith</LastName><Initials>J</Initials></Author>
            </AuthorList>
            <Abstract><AbstractText>An abstract.</AbstractText></Abstract>
        """
        mesh = """
            <MeshHeadingList>
                <MeshHeading>
                    <DescriptorName>Heart Failure</DescriptorName>
                    <QualifierName>drug therapy</QualifierName>
                    <QualifierName>mortality</QualifierName>
                </MeshHeading>
                <MeshHeading><DescriptorName>Humans</DescriptorName></MeshHeading>
            </MeshHeadingList>
        """
        xml = _article_set(
            _article("12345", body, title="Trial").replace(
                "</MedlineCitation>", mesh + "</MedlineCitation>"
            )
        )

        [article] = ArticleExtractor().extract_from_xml(xml)

        assert article.pmid == "12345"
        assert article.title == "Trial"
        assert article.authors == ["Smith J"]
        assert article.journal == "Circulation"
        assert article.pub_date == "2023"
        assert article.abstract == "An abstract."
        assert article.mesh_terms == ["Heart Failure", "drug therapy", "mortality", "Humans"]
        assert article.url == "https://pubmed.ncbi.nlm.nih.gov/12345/"
        assert article.is_stub is False

    def test_missing_citation_becomes_stub_in_place(self):
        broken = """
        <PubmedArticle>
            <PubmedData>
                <ArticleIdList><ArticleId IdType="pubmed">222</ArticleId></ArticleIdList>
            </PubmedData>
        </PubmedArticle>
        """
        xml = _article_set(_article("111"), broken, _article("333"))

        articles = ArticleExtractor().extract_from_xml(xml)

        assert [a.pmid for a in articles] == ["111", "222", "333"]
        assert articles[1].is_stub is True
        assert articles[1].title == "Untitled Article"
        assert articles[0].is_stub is False
        assert articles[2].is_stub is False

    def test_unexpected_failure_is_isolated(self):
        xml = _article_set(_article("1"), _article("2"), _article("3"))

        with patch(
            "literature_scout.services.article_extractor.extract_authors",
            side_effect=[[], ValueError("boom"), []],
        ):
            articles = ArticleExtractor().extract_from_xml(xml)

        assert len(articles) == 3
        assert [a.is_stub for a in articles] == [False, True, False]
        assert articles[1].pmid == "2"

    def test_single_article_root(self):
        root = ET.fromstring(_article("77"))

        [article] = ArticleExtractor().extract(root)

        assert article.pmid == "77"

    def test_empty_set_returns_empty_list(self):
        assert ArticleExtractor().extract_from_xml("<PubmedArticleSet></PubmedArticleSet>") == []

    @pytest.mark.parametrize("raw", ["not valid xml <unclosed", ""])
    def test_unparseable_payload_raises(self, raw):
        with pytest.raises(ExtractionError, match="Failed to parse PubMed XML"):
            ArticleExtractor().extract_from_xml(raw)
