"""Data models for pubmed-retrieve."""

from pubmed_retrieve.models.model_pubmed_article import (
    ArticleRecord,
    ArticleRecordSet,
    Author,
    PubDate,
    SearchQuery,
    SearchResult,
)

__all__ = [
    "ArticleRecord",
    "ArticleRecordSet",
    "Author",
    "PubDate",
    "SearchQuery",
    "SearchResult",
]
