# ==============================================
# REPORTING
# ==============================================
#
# Read-only consumers of the relationship ledger.
#
# Modules:
# --------
# - erd.py  → Parent-grouped relationship tree for the console
#
# ==============================================

from .erd import render_relationship_tree, print_relationship_tree

__all__ = ["render_relationship_tree", "print_relationship_tree"]
