"""Application layer: use cases, services and platform strategies."""
