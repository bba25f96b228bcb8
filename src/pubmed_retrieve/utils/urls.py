"""Request URL construction for the E-utilities endpoints."""

from collections.abc import Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pubmed_retrieve.data_sources.base_client import InvalidEndpoint


def build_url(base: str, params: Mapping[str, str], *, source: str = "url") -> str:
    """
    Return `base` with `params` merged into its query string.

    Keys already present on `base` are replaced, so each key appears once.
    Values are percent-encoded with standard query encoding.

    Raises
    ------
    InvalidEndpoint
        If `base` is not an absolute http(s) URL.
    """
    try:
        parts = urlsplit(base)
        # Accessing .port validates it; urlsplit alone does not.
        parts.port
    except ValueError as e:
        raise InvalidEndpoint(source, f"Invalid endpoint {base!r}: {e}") from e

    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidEndpoint(source, f"Invalid endpoint {base!r}")

    for key, value in params.items():
        if not isinstance(value, str):
            raise TypeError(
                f"Query parameter {key!r} must be str, got {type(value).__name__}"
            )

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(params)

    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment)
    )
