"""pubmed-retrieve: resolve PubMed queries to PMIDs and fetch full records."""

__version__ = "0.1.0"
