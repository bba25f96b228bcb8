"""
JSON serialization of article record sets.

The emitted document is a flat JSON array, one object per article:

    {"pmid": 12345, "journal": "...", "abstract": "...",
     "pubDate": {"year": 2020, "month": 0, "day": 0},
     "authors": [{"lastName": "...", "foreName": "...", "affiliation": "..."}]}

The identifier key is configurable; "_id" reproduces the key older
consumers were built against.
"""

import json
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pubmed_retrieve.constants import DEFAULT_RECORD_ID_FIELD
from pubmed_retrieve.data_sources.base_client import DecodeError, EncodeError
from pubmed_retrieve.models.model_pubmed_article import ArticleRecord, ArticleRecordSet

logger = logging.getLogger(__name__)

SOURCE = "serializer"

_RECORDS = TypeAdapter(list[ArticleRecord])

# JSON keys every record carries besides its identifier
_RECORD_KEYS = frozenset(
    field.alias or name
    for name, field in ArticleRecord.model_fields.items()
    if name != "pmid"
)


def serialize_records(
    record_set: ArticleRecordSet,
    *,
    id_field: str = DEFAULT_RECORD_ID_FIELD,
    indent: int | None = None,
) -> bytes:
    """Encode `record_set` as UTF-8 JSON."""
    if id_field in _RECORD_KEYS:
        raise EncodeError(SOURCE, f"id_field {id_field!r} collides with a record key")
    try:
        rows = [_rename_id(row, "pmid", id_field) for row in _dump(record_set)]
        return json.dumps(rows, indent=indent, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(SOURCE, f"Failed to encode records: {e}") from e


def deserialize_records(
    data: bytes | str, *, id_field: str = DEFAULT_RECORD_ID_FIELD
) -> ArticleRecordSet:
    """Decode the output of `serialize_records` back into an ArticleRecordSet."""
    if id_field in _RECORD_KEYS:
        raise DecodeError(SOURCE, f"id_field {id_field!r} collides with a record key")
    try:
        rows = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(SOURCE, f"Failed to parse JSON: {e}") from e
    if not isinstance(rows, list):
        raise DecodeError(SOURCE, f"Expected a JSON array, got {type(rows).__name__}")
    if not all(isinstance(row, dict) for row in rows):
        raise DecodeError(SOURCE, "Expected an array of JSON objects")

    try:
        articles = _RECORDS.validate_python(
            [_rename_id(row, id_field, "pmid") for row in rows]
        )
    except ValidationError as e:
        raise DecodeError(SOURCE, f"Invalid record: {e}") from e

    return ArticleRecordSet(articles=articles)


def _dump(record_set: ArticleRecordSet) -> list[dict[str, Any]]:
    return [
        article.model_dump(mode="json", by_alias=True)
        for article in record_set.articles
    ]


def _rename_id(row: dict[str, Any], old: str, new: str) -> dict[str, Any]:
    if old == new:
        return row
    return {(new if key == old else key): value for key, value in row.items()}
