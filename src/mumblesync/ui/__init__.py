"""Surface-facing derivations (no widgets)."""
