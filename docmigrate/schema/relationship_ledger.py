# ==============================================
# RelationshipLedger
# ==============================================
#
# PURPOSE:
#   Ordered record of (parent table, child table) pairs found
#   while discovering nested structure.
#
# WHY THIS CLASS EXISTS:
#   The discovery pass is the only place that knows which table
#   nests under which. Reporting (ERD tree, snapshots) reads the
#   ledger afterwards. It is injected into the discoverer instead
#   of living as global state, so one run owns one ledger.
#
# CARDINALITY:
#   One edge per discovery event: each document field occurrence
#   that introduces nesting (a nested document, or a non-empty
#   array) appends once. Two documents with the same nested field
#   append twice. The ledger never deduplicates; grouped() keeps
#   duplicates too, distinct_edges() is there for consumers that
#   want a set.
#
# ==============================================

from dataclasses import dataclass
from typing import Dict, Iterator, List


@dataclass(frozen=True)
class RelationshipEdge:
    """A child table linked to its parent via ParentId → parent.Id."""
    parent: str
    child: str

    def to_dict(self) -> Dict[str, str]:
        return {"parent": self.parent, "child": self.child}


class RelationshipLedger:
    """Append-only list of relationship edges, in discovery order."""

    def __init__(self):
        self._edges: List[RelationshipEdge] = []

    def record(self, parent: str, child: str) -> RelationshipEdge:
        edge = RelationshipEdge(parent, child)
        self._edges.append(edge)
        return edge

    @property
    def edges(self) -> tuple[RelationshipEdge, ...]:
        return tuple(self._edges)

    def grouped(self) -> Dict[str, List[str]]:
        """
        Group children under their parent.

        Returns:
            parent → children, both in first-seen order; duplicates kept
        """
        groups: Dict[str, List[str]] = {}
        for edge in self._edges:
            groups.setdefault(edge.parent, []).append(edge.child)
        return groups

    def distinct_edges(self) -> List[RelationshipEdge]:
        return list(dict.fromkeys(self._edges))

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {"edges": [edge.to_dict() for edge in self._edges]}

    def __iter__(self) -> Iterator[RelationshipEdge]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)
