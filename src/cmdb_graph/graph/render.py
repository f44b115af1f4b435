"""Tree-text and structured renderings of a traversal.

Both renderers are ``TraversalSink`` implementations, so they can be fed
live by the engine or replayed over a finished ``TraversalResult``.

Public API:
    TreeRenderer: Indented box-drawing tree.
    RecordRenderer: ``{"root": ..., "relationships": [...]}`` record.
    render_tree: Render a finished result as text.
    to_record: Render a finished result as a dict.
"""

from __future__ import annotations

from typing import Any, Callable

from .types import CINode, Direction, RelationshipEntry, TraversalResult

ARROWS = {
    Direction.UPSTREAM: "↑",
    Direction.DOWNSTREAM: "↓",
}

_MID = "├── "
_LAST = "└── "
_PIPE = "│   "
_BLANK = "    "


def _label(node: CINode) -> str:
    return f"{node.name} [{node.ci_class}]"


class TreeRenderer:
    """Renders entries as lines of an indented tree.

    Example::

        web-portal [cmdb_ci_service]
        ├── ↓ app-01 [cmdb_ci_appl] (Depends on::Used by)
        │   └── ↓ db-01 [cmdb_ci_db_instance] (Depends on::Used by)
        └── ↑ lb-01 [cmdb_ci_lb] (Depends on::Used by)

    Args:
        write: Optional callback receiving each line as it is produced.
    """

    def __init__(self, write: Callable[[str], None] | None = None) -> None:
        self._write = write
        self.lines: list[str] = []

    def _add(self, line: str) -> None:
        self.lines.append(line)
        if self._write is not None:
            self._write(line)

    def start(self, root: CINode) -> None:
        self.lines = []
        self._add(_label(root))

    def emit(self, entry: RelationshipEntry) -> None:
        *ancestors, is_last = entry.branch or (True,)
        indent = "".join(_BLANK if last else _PIPE for last in ancestors)
        connector = _LAST if is_last else _MID
        arrow = ARROWS.get(entry.direction, "")
        self._add(f"{indent}{connector}{arrow} {_label(entry.node)} ({entry.rel_type})")

    def finish(self, result: TraversalResult) -> None:
        pass

    def text(self) -> str:
        return "\n".join(self.lines)


class RecordRenderer:
    """Collects entries into a JSON-ready record in discovery order."""

    def __init__(self) -> None:
        self.record: dict[str, Any] = {"root": None, "relationships": []}

    def start(self, root: CINode) -> None:
        self.record = {"root": root.to_dict(), "relationships": []}

    def emit(self, entry: RelationshipEntry) -> None:
        self.record["relationships"].append(entry.to_dict())

    def finish(self, result: TraversalResult) -> None:
        pass


def _replay(result: TraversalResult, sink: TreeRenderer | RecordRenderer) -> None:
    sink.start(result.root)
    for entry in result.entries:
        sink.emit(entry)
    sink.finish(result)


def render_tree(result: TraversalResult) -> str:
    renderer = TreeRenderer()
    _replay(result, renderer)
    return renderer.text()


def to_record(result: TraversalResult) -> dict[str, Any]:
    renderer = RecordRenderer()
    _replay(result, renderer)
    return renderer.record


__all__ = ["TreeRenderer", "RecordRenderer", "render_tree", "to_record", "ARROWS"]
