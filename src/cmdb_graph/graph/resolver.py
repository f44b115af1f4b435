"""Resolves a user-supplied CI reference to a single root node."""

from __future__ import annotations

import logging
import re

from ..exceptions import CINotFoundError
from ..sources.protocol import RecordSource
from ..sources.query import EncodedQuery, raw_value
from ..sources.tables import CI_FIELDS, CI_TABLE
from .types import UNKNOWN_CLASS, CINode

logger = logging.getLogger(__name__)

NAME_CANDIDATE_LIMIT = 5
# Second, wider page when case-insensitive matches crowd out the exact name.
NAME_SCAN_LIMIT = 100

_SYS_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def looks_like_sys_id(reference: str) -> bool:
    """True for 32 lowercase hex characters, the shape of a sys_id."""
    return bool(_SYS_ID_RE.match(reference))


class IdentityResolver:
    """Turns a CI name or sys_id into a ``CINode``.

    Name lookups are case-sensitive and consider at most
    *candidate_limit* records.  If the store filled that page with other
    casings of the name, one wider page of ``NAME_SCAN_LIMIT`` is read.
    When several CIs share the name the one with the lowest sys_id wins,
    so repeated runs pick the same root.
    Record source errors propagate: failing to resolve the root is fatal.
    """

    def __init__(
        self,
        source: RecordSource,
        ci_table: str = CI_TABLE,
        candidate_limit: int = NAME_CANDIDATE_LIMIT,
    ) -> None:
        self._source = source
        self._ci_table = ci_table
        self._candidate_limit = candidate_limit

    def resolve(self, reference: str, by_id: bool | None = None) -> CINode:
        """Resolve *reference* as a sys_id, a name, or (when *by_id* is
        None) a sys_id if it looks like one with a fallback to the name.
        """
        reference = reference.strip()
        if not reference:
            raise CINotFoundError(reference, "CI reference cannot be empty")
        if by_id:
            return self.resolve_by_id(reference)
        if by_id is None and looks_like_sys_id(reference):
            try:
                return self.resolve_by_id(reference)
            except CINotFoundError:
                logger.debug("%s is not a sys_id, trying it as a name", reference)
        return self.resolve_by_name(reference)

    def resolve_by_id(self, sys_id: str) -> CINode:
        records = self._source.query_records(
            self._ci_table,
            EncodedQuery.equals("sys_id", sys_id),
            fields=CI_FIELDS,
            limit=1,
        )
        if not records:
            raise CINotFoundError(sys_id, f"No CI with sys_id {sys_id}")
        return _to_node(records[0])

    def resolve_by_name(self, name: str) -> CINode:
        matches, full_page = self._name_matches(name, self._candidate_limit)
        if not matches and full_page and self._candidate_limit < NAME_SCAN_LIMIT:
            # Differently-cased names may have filled the page.
            logger.debug("No exact match for %r in the first page, widening", name)
            matches, _ = self._name_matches(name, NAME_SCAN_LIMIT)
        if not matches:
            raise CINotFoundError(name, f"No CI named {name!r}")
        if len(matches) > 1:
            logger.info(
                "%d CIs named %r, using %s (%s)",
                len(matches), name, matches[0].sys_id,
                ", ".join(f"{m.sys_id} [{m.ci_class}]" for m in matches),
            )
        return matches[0]

    def _name_matches(self, name: str, limit: int) -> tuple[list[CINode], bool]:
        """Exact-case matches sorted by sys_id, and whether the page was full."""
        records = self._source.query_records(
            self._ci_table,
            EncodedQuery.equals("name", name),
            fields=CI_FIELDS,
            limit=limit,
        )
        # The store may compare names case-insensitively.
        matches = sorted(
            (_to_node(r) for r in records if raw_value(r.get("name")) == name),
            key=lambda node: node.sys_id,
        )
        return matches, len(records) >= limit


def _to_node(record: dict) -> CINode:
    sys_id = raw_value(record.get("sys_id"))
    return CINode(
        sys_id=sys_id,
        name=raw_value(record.get("name")) or sys_id,
        ci_class=raw_value(record.get("sys_class_name")) or UNKNOWN_CLASS,
    )


__all__ = ["IdentityResolver", "looks_like_sys_id", "NAME_CANDIDATE_LIMIT", "NAME_SCAN_LIMIT"]
