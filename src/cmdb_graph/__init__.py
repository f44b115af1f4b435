"""cmdb-graph: Bounded-depth relationship trees for CMDB configuration items."""

__version__ = "0.1.0"

from .config import InstanceSettings
from .exceptions import (
    CINotFoundError,
    CmdbGraphError,
    InvalidTraversalOptionsError,
    RecordSourceError,
)
from .explorer import RelationshipExplorer
from .graph import (
    CINode,
    ClassCache,
    Direction,
    EdgeFetcher,
    IdentityResolver,
    RecordRenderer,
    RelationshipEntry,
    RelEdge,
    TraversalEngine,
    TraversalOptions,
    TraversalResult,
    TraversalSink,
    TreeRenderer,
    render_tree,
    to_record,
)
from .sources import (
    DisplayValue,
    EncodedQuery,
    InMemoryRecordSource,
    KuzuRecordSource,
    RecordSource,
    TableAPISource,
)

__all__ = [
    # Entry point
    "RelationshipExplorer",
    # Traversal core
    "Direction",
    "CINode",
    "RelEdge",
    "TraversalOptions",
    "RelationshipEntry",
    "TraversalResult",
    "IdentityResolver",
    "ClassCache",
    "EdgeFetcher",
    "TraversalEngine",
    "TraversalSink",
    # Rendering
    "TreeRenderer",
    "RecordRenderer",
    "render_tree",
    "to_record",
    # Record sources
    "RecordSource",
    "DisplayValue",
    "EncodedQuery",
    "TableAPISource",
    "InMemoryRecordSource",
    "KuzuRecordSource",
    # Configuration
    "InstanceSettings",
    # Exceptions
    "CmdbGraphError",
    "CINotFoundError",
    "InvalidTraversalOptionsError",
    "RecordSourceError",
]
