# ==============================================
# Relationship Tree (ERD text view)
# ==============================================
#
# PURPOSE:
#   Print the discovered table nesting, grouped by parent:
#
#     orders
#     └── orders_lines (ParentId → orders.Id)
#     └── orders_tags (ParentId → orders.Id)
#
#   Parents appear in first-discovery order. The ledger keeps one
#   edge per discovery event, so a child is listed once here even
#   if many documents introduced it.
#
# ==============================================

from docmigrate.schema.relationship_ledger import RelationshipLedger


def render_relationship_tree(ledger: RelationshipLedger) -> str:
    lines: list[str] = []
    for parent, children in ledger.grouped().items():
        lines.append(parent)
        for child in dict.fromkeys(children):
            lines.append(f"└── {child} (ParentId → {parent}.Id)")
    return "\n".join(lines)


def print_relationship_tree(ledger: RelationshipLedger) -> None:
    if len(ledger) == 0:
        print("No relationships discovered.")
        return
    print("\n🔗 Relationships:")
    print(render_relationship_tree(ledger))
