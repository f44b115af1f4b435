"""Record sources the traversal core reads from.

Public API:
    RecordSource: Protocol every source implements.
    DisplayValue: Raw / display / both value modes.
    Condition: Single filter clause.
    EncodedQuery: Conditions joined by AND or OR.
    TableAPISource: ServiceNow Table API over HTTPS.
    InMemoryRecordSource: Dict-based source for tests.
    KuzuRecordSource: Offline snapshot in an embedded Kuzu database.
"""

from __future__ import annotations

from .kuzu_source import KuzuRecordSource
from .memory_source import InMemoryRecordSource
from .protocol import RecordSource
from .query import Condition, DisplayValue, EncodedQuery, display_value, raw_value
from .table_api import TableAPISource
from .tables import CI_FIELDS, CI_TABLE, REL_FIELDS, REL_TABLE

__all__ = [
    "RecordSource",
    "DisplayValue",
    "Condition",
    "EncodedQuery",
    "raw_value",
    "display_value",
    "TableAPISource",
    "InMemoryRecordSource",
    "KuzuRecordSource",
    "CI_TABLE",
    "REL_TABLE",
    "CI_FIELDS",
    "REL_FIELDS",
]
