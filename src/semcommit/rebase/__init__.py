"""Interactive history rewriting."""
