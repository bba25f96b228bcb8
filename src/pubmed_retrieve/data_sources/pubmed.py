"""
PubMed E-utilities client.

Four methods:
  1. search         — Resolve a query to a count and ranked PMIDs
  2. get_count      — Quick count of results without fetching
  3. fetch_articles — Fetch and decode full records for given PMIDs
  4. retrieve       — search + fetch_articles for one query
"""

from __future__ import annotations

import logging

from pubmed_retrieve.constants import PUBMED_DATABASE
from pubmed_retrieve.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    DataSourceError,
    DecodeError,
    FetchError,
    InvalidEndpoint,
    QueryBuildError,
    RequestContext,
)
from pubmed_retrieve.models.model_pubmed_article import (
    ArticleRecordSet,
    SearchQuery,
    SearchResult,
)
from pubmed_retrieve.parsing.pubmed_xml import parse_article_set, parse_search_result
from pubmed_retrieve.utils.urls import build_url

logger = logging.getLogger("pubmed_retrieve.data_sources.pubmed")

SEARCH_STAGE = "search"
FETCH_STAGE = "fetch"


class PubMedClient(BaseClient):
    """Client for querying PubMed/NCBI E-utilities."""

    def __init__(self, config: ClientConfig | None = None) -> None:
        super().__init__(config)

    @property
    def _source_name(self) -> str:
        return "pubmed"

    # -- Public methods -------------------------------------------------------

    async def search(
        self, query: SearchQuery | str, max_results: int | None = None
    ) -> SearchResult:
        """Search PubMed and return the match count and ranked PMIDs."""
        query = self._as_query(query, max_results)
        params = {
            "db": query.database,
            "term": query.term,
            "retmax": str(query.max_results),
        }

        body = await self._get_stage(
            SEARCH_STAGE, self.config.search_url, params, method="search"
        )
        try:
            result = parse_search_result(body)
        except DecodeError as e:
            raise self._with_stage(SEARCH_STAGE, e) from e

        logger.info(
            "Search %r matched %d records, returned %d PMIDs",
            query.term,
            result.count,
            len(result.pmids),
        )
        return result

    async def search_pmids(
        self, query: SearchQuery | str, max_results: int | None = None
    ) -> list[int]:
        """Search PubMed and return only the ranked PMIDs."""
        result = await self.search(query, max_results)
        return result.pmids

    async def get_count(self, query: SearchQuery | str) -> int:
        """Quick count of results without fetching PMIDs."""
        result = await self.search(self._as_query(query, 0))
        return result.count

    async def fetch_articles(
        self, pmids: list[int], database: str = PUBMED_DATABASE
    ) -> ArticleRecordSet:
        """Fetch and decode full records for the given PMIDs in one request."""
        if not pmids:
            return ArticleRecordSet()

        params = {
            "db": database,
            "id": ",".join(str(pmid) for pmid in pmids),
            "retmode": "xml",
        }

        body = await self._get_stage(
            FETCH_STAGE, self.config.fetch_url, params, method="fetch_articles"
        )
        try:
            record_set = parse_article_set(body)
        except DecodeError as e:
            raise self._with_stage(FETCH_STAGE, e) from e

        if len(record_set) < len(pmids):
            logger.warning(
                "Requested %d PMIDs, upstream returned %d articles",
                len(pmids),
                len(record_set),
            )
        return record_set

    async def retrieve(
        self, query: SearchQuery | str, max_results: int | None = None
    ) -> ArticleRecordSet:
        """Resolve `query` to PMIDs, then fetch their full records."""
        query = self._as_query(query, max_results)
        result = await self.search(query)
        if not result.pmids:
            logger.info("No PMIDs for %r; skipping fetch", query.term)
            return ArticleRecordSet()
        return await self.fetch_articles(result.pmids, database=query.database)

    # -- Private helpers ------------------------------------------------------

    @staticmethod
    def _as_query(query: SearchQuery | str, max_results: int | None) -> SearchQuery:
        if isinstance(query, str):
            query = SearchQuery(term=query)
        if max_results is not None:
            query = SearchQuery(
                term=query.term, database=query.database, max_results=max_results
            )
        return query

    async def _get_stage(
        self, stage: str, base_url: str, params: dict[str, str], *, method: str
    ) -> bytes:
        """Build the URL for `stage` and return the response body."""
        try:
            url = build_url(base_url, params, source=self._source_name)
        except InvalidEndpoint as e:
            raise QueryBuildError(self._source_name, stage, e) from e

        context = RequestContext(source=self._source_name, method=method, params=params)
        try:
            return await self.fetch_bytes(url, context=context)
        except DataSourceError as e:
            raise FetchError(self._source_name, stage, e) from e

    def _with_stage(self, stage: str, error: DecodeError) -> DecodeError:
        return DecodeError(
            self._source_name,
            f"{stage} failed: {error.message}",
            stage=stage,
            original=error,
        )
