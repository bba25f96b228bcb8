"""
Pydantic models for PubMed retrieval.

These are the data contracts between the PubMed client, the serializer,
and callers. Callers receive these models - they never see raw XML.
"""

from pydantic import BaseModel, ConfigDict, Field

from pubmed_retrieve.constants import DEFAULT_MAX_RESULTS, PUBMED_DATABASE


class SearchQuery(BaseModel):
    """A free-text PubMed query plus the fixed request parameters."""

    model_config = ConfigDict(frozen=True)

    term: str
    database: str = PUBMED_DATABASE
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=0)  # retmax


class SearchResult(BaseModel):
    """Decoded eSearchResult: upstream match count and ranked PMIDs."""

    model_config = ConfigDict(frozen=True)

    count: int = 0  # total matches upstream, not capped by max_results
    pmids: list[int] = []  # relevance order, at most max_results


class Author(BaseModel):
    """One entry of an article's AuthorList."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    last_name: str = Field(alias="lastName")
    fore_name: str = Field(default="", alias="foreName")
    affiliation: str = ""


class PubDate(BaseModel):
    """Journal issue publication date; 0 means the component is absent."""

    model_config = ConfigDict(frozen=True)

    year: int = 0
    month: int = 0
    day: int = 0


class ArticleRecord(BaseModel):
    """A single PubMed article."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pmid: int  # PubMed identifier (e.g. 33567185)
    journal: str = ""  # full journal title
    abstract: str = ""  # joined sections; empty string if missing
    pub_date: PubDate = Field(default_factory=PubDate, alias="pubDate")
    authors: list[Author] = []


class ArticleRecordSet(BaseModel):
    """Ordered articles returned by one retrieval call."""

    model_config = ConfigDict(frozen=True)

    articles: list[ArticleRecord] = []

    def __len__(self) -> int:
        return len(self.articles)

    @property
    def pmids(self) -> list[int]:
        return [article.pmid for article in self.articles]
