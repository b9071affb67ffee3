"""Runtime - cross-cutting services (observability)."""
