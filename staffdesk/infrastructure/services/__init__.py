"""Infrastructure services (resilience helpers)."""
