# ==============================================
# Tests for RelationshipLedger and the ERD tree
# ==============================================

from docmigrate.reporting import print_relationship_tree, render_relationship_tree
from docmigrate.schema import RelationshipEdge, RelationshipLedger


def build_ledger(*pairs):
    ledger = RelationshipLedger()
    for parent, child in pairs:
        ledger.record(parent, child)
    return ledger


class TestRelationshipLedger:
    def test_record_keeps_order(self):
        ledger = build_ledger(("orders", "orders_lines"), ("orders", "orders_tags"))
        assert ledger.edges == (
            RelationshipEdge("orders", "orders_lines"),
            RelationshipEdge("orders", "orders_tags"),
        )

    def test_record_returns_edge(self):
        edge = RelationshipLedger().record("a", "a_b")
        assert edge.parent == "a"
        assert edge.child == "a_b"

    def test_duplicates_are_kept(self):
        ledger = build_ledger(("a", "a_b"), ("a", "a_b"))
        assert len(ledger) == 2
        assert ledger.grouped() == {"a": ["a_b", "a_b"]}
        assert ledger.distinct_edges() == [RelationshipEdge("a", "a_b")]

    def test_grouped_by_parent_in_first_seen_order(self):
        ledger = build_ledger(("b", "b_x"), ("a", "a_y"), ("b", "b_z"))
        assert list(ledger.grouped()) == ["b", "a"]
        assert ledger.grouped()["b"] == ["b_x", "b_z"]

    def test_to_dict(self):
        ledger = build_ledger(("orders", "orders_lines"))
        assert ledger.to_dict() == {"edges": [{"parent": "orders", "child": "orders_lines"}]}

    def test_edges_are_read_only(self):
        ledger = build_ledger(("a", "a_b"))
        assert isinstance(ledger.edges, tuple)


class TestRelationshipTree:
    def test_render_groups_children_under_parent(self):
        ledger = build_ledger(
            ("orders", "orders_lines"),
            ("orders", "orders_lines"),
            ("orders", "orders_tags"),
            ("orders_lines", "orders_lines_meta"),
        )
        assert render_relationship_tree(ledger).splitlines() == [
            "orders",
            "└── orders_lines (ParentId → orders.Id)",
            "└── orders_tags (ParentId → orders.Id)",
            "orders_lines",
            "└── orders_lines_meta (ParentId → orders_lines.Id)",
        ]

    def test_print_empty_ledger(self, capsys):
        print_relationship_tree(RelationshipLedger())
        assert capsys.readouterr().out.strip() == "No relationships discovered."

    def test_print_tree(self, capsys):
        print_relationship_tree(build_ledger(("users", "users_address")))
        out = capsys.readouterr().out
        assert "🔗 Relationships:" in out
        assert "└── users_address (ParentId → users.Id)" in out
