"""Programmatic entry points for the search -> fetch -> serialize pipeline."""

import asyncio

from pubmed_retrieve.config import Settings, get_settings
from pubmed_retrieve.data_sources.base_client import ClientConfig
from pubmed_retrieve.data_sources.pubmed import PubMedClient
from pubmed_retrieve.models.model_pubmed_article import SearchQuery
from pubmed_retrieve.services.serializer import serialize_records


def _build_query(
    query: str, max_results: int | None, settings: Settings
) -> SearchQuery:
    if max_results is None:
        max_results = settings.pubmed_max_results
    return SearchQuery(term=query, max_results=max_results)


async def retrieve_records(
    query: str,
    *,
    max_results: int | None = None,
    id_field: str | None = None,
    config: ClientConfig | None = None,
    indent: int | None = None,
) -> bytes:
    """Run the full pipeline for `query` and return the serialized records."""
    settings = get_settings()
    search_query = _build_query(query, max_results, settings)

    async with PubMedClient(config or ClientConfig.from_settings(settings)) as client:
        record_set = await client.retrieve(search_query)

    return serialize_records(
        record_set, id_field=id_field or settings.record_id_field, indent=indent
    )


async def retrieve_pmids(
    query: str,
    *,
    max_results: int | None = None,
    config: ClientConfig | None = None,
) -> list[int]:
    """Resolve `query` to its ranked PMIDs."""
    settings = get_settings()
    search_query = _build_query(query, max_results, settings)

    async with PubMedClient(config or ClientConfig.from_settings(settings)) as client:
        return await client.search_pmids(search_query)


async def count_matches(query: str, *, config: ClientConfig | None = None) -> int:
    """Number of records upstream reports for `query`."""
    settings = get_settings()
    async with PubMedClient(config or ClientConfig.from_settings(settings)) as client:
        return await client.get_count(query)


if __name__ == "__main__":
    output = asyncio.run(retrieve_records("cancer[majr] AND Cell[ta]", indent=2))
    print(output.decode("utf-8"))
