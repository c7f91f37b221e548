"""Auto catalog: brand / model / category catalog resolution service."""
