"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pubmed_retrieve.data_sources.base_client import ClientConfig
from pubmed_retrieve.data_sources.pubmed import PubMedClient


def _search_xml(pmids: list[int], count: int | None = None) -> str:
    ids = "".join(f"<Id>{pmid}</Id>" for pmid in pmids)
    count = len(pmids) if count is None else count
    return (
        '<?xml version="1.0" encoding="UTF-8" ?>'
        "<eSearchResult>"
        f"<Count>{count}</Count><RetMax>{len(pmids)}</RetMax><RetStart>0</RetStart>"
        f"<IdList>{ids}</IdList>"
        "</eSearchResult>"
    )


def _article_xml(
    pmid: int,
    journal: str = "Cell",
    abstract: str = "...",
    year: str = "2020",
    month: str | None = None,
    day: str | None = None,
    authors: list[tuple[str, str, str]] | None = None,
) -> str:
    date_parts = f"<Year>{year}</Year>"
    if month is not None:
        date_parts += f"<Month>{month}</Month>"
    if day is not None:
        date_parts += f"<Day>{day}</Day>"

    author_elems = ""
    for last, fore, affiliation in authors or []:
        author_elems += f'<Author ValidYN="Y"><LastName>{last}</LastName>'
        if fore:
            author_elems += f"<ForeName>{fore}</ForeName>"
        if affiliation:
            author_elems += (
                f"<AffiliationInfo><Affiliation>{affiliation}</Affiliation>"
                "</AffiliationInfo>"
            )
        author_elems += "</Author>"

    return (
        "<PubmedArticle>"
        '<MedlineCitation Status="MEDLINE" Owner="NLM">'
        f'<PMID Version="1">{pmid}</PMID>'
        '<Article PubModel="Print">'
        "<Journal>"
        '<JournalIssue CitedMedium="Internet">'
        f"<Volume>1</Volume><PubDate>{date_parts}</PubDate>"
        "</JournalIssue>"
        f"<Title>{journal}</Title>"
        "</Journal>"
        f"<ArticleTitle>Article {pmid}</ArticleTitle>"
        f"<Abstract><AbstractText>{abstract}</AbstractText></Abstract>"
        f'<AuthorList CompleteYN="Y">{author_elems}</AuthorList>'
        "</Article>"
        "</MedlineCitation>"
        "</PubmedArticle>"
    )


def _article_set_xml(*articles: str) -> str:
    return (
        '<?xml version="1.0" ?>'
        "<!DOCTYPE PubmedArticleSet PUBLIC "
        '"-//NLM//DTD PubMedArticle, 1st January 2024//EN" '
        '"https://dtd.nlm.nih.gov/ncbi/pubmed/out/pubmed_240101.dtd">'
        f"<PubmedArticleSet>{''.join(articles)}</PubmedArticleSet>"
    )


@pytest.fixture
def search_xml() -> Callable[..., str]:
    """Builder for eSearchResult documents."""
    return _search_xml


@pytest.fixture
def article_xml() -> Callable[..., str]:
    """Builder for a single PubmedArticle element."""
    return _article_xml


@pytest.fixture
def article_set_xml() -> Callable[..., str]:
    """Builder for a PubmedArticleSet document wrapping PubmedArticle elements."""
    return _article_set_xml


class FakeEUtils:
    """
    In-process stand-in for esearch.fcgi / efetch.fcgi.

    `terms` maps a search term to its ranked PMIDs. eFetch answers with one
    article per requested PMID unless the PMID is listed in `omit`.
    `status` forces an error status on the named endpoint.
    """

    def __init__(self) -> None:
        self.terms: dict[str, list[int]] = {}
        self.omit: set[int] = set()
        self.status: dict[str, int] = {}
        self.requests: list[tuple[str, dict[str, str]]] = []

    async def esearch(self, request: web.Request) -> web.Response:
        params = dict(request.query)
        self.requests.append(("esearch", params))
        if "esearch" in self.status:
            return web.Response(status=self.status["esearch"], text="upstream error")
        pmids = self.terms.get(params.get("term", ""), [])
        retmax = int(params.get("retmax", "20"))
        return web.Response(
            text=_search_xml(pmids[:retmax], count=len(pmids)),
            content_type="text/xml",
        )

    async def efetch(self, request: web.Request) -> web.Response:
        params = dict(request.query)
        self.requests.append(("efetch", params))
        if "efetch" in self.status:
            return web.Response(status=self.status["efetch"], text="upstream error")
        pmids = [int(p) for p in params.get("id", "").split(",") if p]
        articles = [
            _article_xml(pmid, authors=[(f"Author{pmid}", "A", "")])
            for pmid in pmids
            if pmid not in self.omit
        ]
        return web.Response(text=_article_set_xml(*articles), content_type="text/xml")

    def calls(self, endpoint: str) -> list[dict[str, str]]:
        return [params for name, params in self.requests if name == endpoint]


@pytest.fixture
def fake_eutils() -> FakeEUtils:
    return FakeEUtils()


@pytest.fixture
async def eutils_server(fake_eutils: FakeEUtils):
    """Serve `fake_eutils` on a local port for the duration of a test."""
    app = web.Application()
    app.router.add_get("/entrez/eutils/esearch.fcgi", fake_eutils.esearch)
    app.router.add_get("/entrez/eutils/efetch.fcgi", fake_eutils.efetch)
    server = TestServer(app)
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
def local_config(eutils_server: TestServer) -> ClientConfig:
    """ClientConfig pointing at the local E-utilities server."""
    return ClientConfig(
        search_url=str(eutils_server.make_url("/entrez/eutils/esearch.fcgi")),
        fetch_url=str(eutils_server.make_url("/entrez/eutils/efetch.fcgi")),
        timeout_seconds=5.0,
    )


@pytest.fixture
async def pubmed_client(local_config: ClientConfig):
    """Create and tear down a PubMedClient bound to the local server."""
    c = PubMedClient(local_config)
    yield c
    await c.close()
