"""Project-wide constants."""

# -- Base client defaults ---------------------------------------------------
DEFAULT_TIMEOUT: float = 30.0
ERROR_BODY_EXCERPT: int = 500  # characters of a failed response kept in errors

# -- PubMed / NCBI ----------------------------------------------------------
NCBI_BASE_URL: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
PUBMED_SEARCH_URL: str = f"{NCBI_BASE_URL}/esearch.fcgi"
PUBMED_FETCH_URL: str = f"{NCBI_BASE_URL}/efetch.fcgi"
PUBMED_DATABASE: str = "pubmed"
DEFAULT_MAX_RESULTS: int = 10

# -- Serialization ------------------------------------------------------------
# Older consumers expect "_id" for the record identifier.
DEFAULT_RECORD_ID_FIELD: str = "pmid"

# -- PubDate month abbreviations (MEDLINE uses "Jan".."Dec") ---------------
MONTH_ABBREVIATIONS: dict[str, int] = {
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
