"""
Decoding of E-utilities XML documents.

Both eSearch and eFetch responses are decoded here. Article fields are
read through one path table, ``ARTICLE_FIELD_PATHS``, so every caller maps
the PubmedArticle schema the same way.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

from pubmed_retrieve.constants import MONTH_ABBREVIATIONS
from pubmed_retrieve.data_sources.base_client import DecodeError
from pubmed_retrieve.models.model_pubmed_article import (
    ArticleRecord,
    ArticleRecordSet,
    Author,
    PubDate,
    SearchResult,
)

logger = logging.getLogger(__name__)

SOURCE = "pubmed"

# Paths are relative to a PubmedArticle element.
ARTICLE_FIELD_PATHS: dict[str, str] = {
    "pmid": "MedlineCitation/PMID",
    "journal": "MedlineCitation/Article/Journal/Title",
    "abstract": "MedlineCitation/Article/Abstract/AbstractText",
    "pub_date": "MedlineCitation/Article/Journal/JournalIssue/PubDate",
    "authors": "MedlineCitation/Article/AuthorList/Author",
}

# Paths are relative to an Author element.
AUTHOR_FIELD_PATHS: dict[str, str] = {
    "last_name": "LastName",
    "fore_name": "ForeName",
    "affiliation": "AffiliationInfo/Affiliation",
}
# Group authors (<CollectiveName>) carry no LastName and are not mapped.

_YEAR_RE = re.compile(r"\b(\d{4})\b")


def _parse_root(xml_bytes: bytes | str, expected_tag: str) -> ET.Element:
    try:
        root = ET.fromstring(xml_bytes)
    except ET.ParseError as e:
        raise DecodeError(SOURCE, f"Failed to parse XML: {e}") from e
    if root.tag != expected_tag:
        raise DecodeError(
            SOURCE, f"Expected <{expected_tag}> document, got <{root.tag}>"
        )
    return root


def _xml_text(elem: ET.Element, path: str) -> str:
    """Text of the first element at `path`, inline markup flattened."""
    found = elem.find(path)
    if found is None:
        return ""
    return "".join(found.itertext()).strip()


def _parse_int(value: str, what: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise DecodeError(SOURCE, f"{what} is not an integer: {value!r}") from e


def _parse_pmid(value: str, what: str) -> int:
    # Plain ASCII digits, nonzero
    if not (value.isascii() and value.isdigit()) or int(value) == 0:
        raise DecodeError(SOURCE, f"{what} is not a positive integer: {value!r}")
    return int(value)


# ---------------------------------------------------------------------------
# eSearch
# ---------------------------------------------------------------------------


def parse_search_result(xml_bytes: bytes | str) -> SearchResult:
    """Decode an eSearchResult document into a count and ranked PMIDs."""
    root = _parse_root(xml_bytes, "eSearchResult")

    error = root.find("ERROR")
    if error is not None:
        raise DecodeError(SOURCE, f"eSearch error: {(error.text or '').strip()}")

    count_text = _xml_text(root, "Count")
    if not count_text:
        raise DecodeError(SOURCE, "eSearchResult has no Count")
    count = _parse_int(count_text, "Count")

    pmids = [
        _parse_pmid((id_elem.text or "").strip(), "Id")
        for id_elem in root.findall("IdList/Id")
    ]

    return SearchResult(count=count, pmids=pmids)


# ---------------------------------------------------------------------------
# eFetch
# ---------------------------------------------------------------------------


def parse_article_set(xml_bytes: bytes | str) -> ArticleRecordSet:
    """
    Decode a PubmedArticleSet document.

    Any malformed entry fails the whole document; no partial set is
    returned.
    """
    root = _parse_root(xml_bytes, "PubmedArticleSet")

    articles = []
    for index, article_elem in enumerate(root.findall("PubmedArticle")):
        try:
            articles.append(parse_article(article_elem))
        except DecodeError as e:
            raise DecodeError(SOURCE, f"PubmedArticle #{index}: {e.message}") from e

    skipped = len(root.findall("PubmedBookArticle"))
    if skipped:
        logger.debug("Ignoring %d PubmedBookArticle entries", skipped)

    return ArticleRecordSet(articles=articles)


def parse_article(article_elem: ET.Element) -> ArticleRecord:
    """Map one PubmedArticle element to an ArticleRecord."""
    pmid_text = _xml_text(article_elem, ARTICLE_FIELD_PATHS["pmid"])
    if not pmid_text:
        raise DecodeError(SOURCE, "missing PMID")
    pmid = _parse_pmid(pmid_text, "PMID")

    try:
        pub_date = _parse_pub_date(article_elem.find(ARTICLE_FIELD_PATHS["pub_date"]))
        authors = [
            _parse_author(author_elem)
            for author_elem in article_elem.findall(ARTICLE_FIELD_PATHS["authors"])
            if author_elem.find("CollectiveName") is None
        ]
    except DecodeError as e:
        raise DecodeError(SOURCE, f"PMID {pmid}: {e.message}") from e

    return ArticleRecord(
        pmid=pmid,
        journal=_xml_text(article_elem, ARTICLE_FIELD_PATHS["journal"]),
        abstract=_parse_abstract(article_elem),
        pub_date=pub_date,
        authors=authors,
    )


def _parse_abstract(article_elem: ET.Element) -> str:
    # Structured abstracts have several labelled sections
    parts = []
    for abs_elem in article_elem.findall(ARTICLE_FIELD_PATHS["abstract"]):
        label = abs_elem.get("Label", "")
        text = "".join(abs_elem.itertext()).strip()
        if label and text:
            parts.append(f"{label}: {text}")
        elif text:
            parts.append(text)
    return " ".join(parts)


def _parse_author(author_elem: ET.Element) -> Author:
    last_name = _xml_text(author_elem, AUTHOR_FIELD_PATHS["last_name"])
    if not last_name:
        raise DecodeError(SOURCE, "Author without LastName")
    return Author(
        last_name=last_name,
        fore_name=_xml_text(author_elem, AUTHOR_FIELD_PATHS["fore_name"]),
        affiliation=_xml_text(author_elem, AUTHOR_FIELD_PATHS["affiliation"]),
    )


def _parse_pub_date(date_elem: ET.Element | None) -> PubDate:
    if date_elem is None:
        return PubDate()

    year_text = _xml_text(date_elem, "Year")
    if year_text:
        year = _parse_int(year_text, "PubDate Year")
    else:
        # e.g. <MedlineDate>1998 Dec-1999 Jan</MedlineDate>
        match = _YEAR_RE.search(_xml_text(date_elem, "MedlineDate"))
        year = int(match.group(1)) if match else 0

    month_text = _xml_text(date_elem, "Month")
    day_text = _xml_text(date_elem, "Day")

    return PubDate(
        year=year,
        month=_parse_month(month_text) if month_text else 0,
        day=_parse_int(day_text, "PubDate Day") if day_text else 0,
    )


def _parse_month(value: str) -> int:
    if value.isdigit():
        month = int(value)
    else:
        month = MONTH_ABBREVIATIONS.get(value[:3].lower(), 0)
    if not 1 <= month <= 12:
        raise DecodeError(SOURCE, f"PubDate Month is not a month: {value!r}")
    return month
